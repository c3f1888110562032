"""Scope and resolution-stack state used during a single transform."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, List, Optional, Tuple

from .config import DEFAULT_MAX_DEPTH
from .errors import ResolutionDepthError

_MISSING = object()


@dataclass
class ScopeStack:
    """Stack of local binding frames created by 'let' clauses.

    Lookups search the innermost frame first, so a binding shadows any
    outer binding or input of the same name for as long as its frame is
    on the stack.
    """

    frames: List[Dict[str, Any]] = field(default_factory=list)

    def push(self, bindings: Dict[str, Any]) -> None:
        """Push a new innermost frame."""
        self.frames.append(dict(bindings))

    def pop(self) -> Dict[str, Any]:
        """Pop the innermost frame."""
        return self.frames.pop()

    @contextmanager
    def frame(self, bindings: Dict[str, Any]) -> Generator[None, None, None]:
        """Push bindings for the duration of a with-block.

        The frame is popped on every exit path, including exceptions.
        """
        self.push(bindings)
        try:
            yield
        finally:
            self.pop()

    def lookup(self, name: str) -> Tuple[bool, Any]:
        """Find the innermost binding of name.

        Returns:
            (found, value) pair; value is None when not found
        """
        for frame in reversed(self.frames):
            value = frame.get(name, _MISSING)
            if value is not _MISSING:
                return True, value
        return False, None

    def clear(self) -> None:
        """Drop all frames."""
        self.frames.clear()

    @property
    def depth(self) -> int:
        """Number of frames on the stack."""
        return len(self.frames)


@dataclass
class ResolutionState:
    """Tracks the chain of named inputs currently being resolved.

    Inputs may legitimately call themselves (e.g. through ifelse), so
    only the nesting depth is limited, not repetition.

    Attributes:
        resolution_stack: Input names being resolved, outermost first
        max_depth: Maximum allowed nesting depth
    """

    resolution_stack: List[str] = field(default_factory=list)
    max_depth: int = DEFAULT_MAX_DEPTH

    def push(self, input_name: str) -> None:
        """Push an input onto the resolution stack.

        Raises:
            ResolutionDepthError: If max depth would be exceeded
        """
        if len(self.resolution_stack) >= self.max_depth:
            raise ResolutionDepthError(
                self.resolution_stack + [input_name], self.max_depth
            )
        self.resolution_stack.append(input_name)

    def pop(self) -> str:
        """Pop the most recent input from the resolution stack."""
        return self.resolution_stack.pop()

    @contextmanager
    def entered(self, input_name: str) -> Generator[None, None, None]:
        """Keep input_name on the stack for the duration of a with-block."""
        self.push(input_name)
        try:
            yield
        finally:
            self.pop()

    @property
    def depth(self) -> int:
        """Current nesting depth."""
        return len(self.resolution_stack)

    @property
    def current_input(self) -> Optional[str]:
        """Innermost input being resolved."""
        return self.resolution_stack[-1] if self.resolution_stack else None

    def clear(self) -> None:
        """Drop all entries."""
        self.resolution_stack.clear()
