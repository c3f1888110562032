"""Engine configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_MAX_DEPTH = 64


@dataclass
class EngineConfig:
    """Settings for a single Evaluator.

    Attributes:
        max_depth: Maximum nesting of named-input resolutions
        command_timeout: Seconds to wait for a COMMAND input (None = forever)
        verbose: Trace input resolution on stderr
        quiet: Suppress warnings for soft failures
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    command_timeout: Optional[float] = None
    verbose: bool = False
    quiet: bool = False

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ValueError(
                f"command_timeout must be positive, got {self.command_timeout}"
            )
