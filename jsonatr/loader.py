"""Loading spec files and following their 'use' entries."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from .errors import CircularUseError, SpecParseError
from .jsonio import loads_strict
from .spec import Spec

_YAML_SUFFIXES = (".yml", ".yaml")


class SpecLoader:
    """Loads spec files into fully merged Spec objects.

    Relative 'use' paths are resolved from the directory of the file that
    declares them. Loaded files are cached, so a library used by several
    specs is parsed once and merges idempotently.

    Attributes:
        base_dir: Directory for resolving relative top-level paths
    """

    def __init__(self, base_dir: Union[str, Path, None] = None):
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self._cache: Dict[Path, Spec] = {}
        self._loading: List[Path] = []

    def load(self, path: Union[str, Path]) -> Spec:
        """Load a spec file and everything it uses.

        The used specs are merged first, then the file's own inputs
        and output.

        Raises:
            SpecParseError: If a file cannot be read or parsed
            CircularUseError: If a file transitively uses itself
            SpecError: If merging fails
        """
        return self._load(self._resolve(path, self.base_dir))

    def _load(self, file_path: Path) -> Spec:
        if file_path in self._cache:
            return self._cache[file_path]

        if file_path in self._loading:
            chain = [str(p) for p in self._loading + [file_path]]
            raise CircularUseError(chain)

        self._loading.append(file_path)
        try:
            own = Spec.from_dict(self._read(file_path), origin=str(file_path))
            merged = Spec(uses=list(own.uses), description=own.description)
            for use in own.uses:
                merged.merge(self._load(self._resolve(use, file_path.parent)))
            merged.merge(own)
        finally:
            self._loading.pop()

        self._cache[file_path] = merged
        return merged

    def _resolve(self, path: Union[str, Path], relative_to: Path) -> Path:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = relative_to / candidate
        return candidate.resolve()

    def _read(self, file_path: Path) -> Any:
        """Read a JSON (or YAML, by suffix) spec document."""
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SpecParseError(str(file_path), f"File read error: {e}")

        if file_path.suffix in _YAML_SUFFIXES:
            try:
                return yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise SpecParseError(str(file_path), f"YAML parse error: {e}")

        try:
            return loads_strict(text)
        except ValueError as e:
            raise SpecParseError(str(file_path), f"JSON parse error: {e}")

    def clear_cache(self) -> None:
        """Clear the loaded-file cache."""
        self._cache.clear()


def load_spec(path: Union[str, Path]) -> Spec:
    """Load a single spec file with a fresh loader."""
    return SpecLoader().load(path)
