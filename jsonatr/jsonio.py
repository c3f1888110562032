"""Reading and writing JSON documents.

Only standard JSON is accepted and produced: the NaN, Infinity and
-Infinity extensions of the json module are rejected both ways.
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional, TextIO, Union

from .errors import JsonReadError, JsonWriteError


def reject_constant(name: str) -> Any:
    """parse_constant hook refusing NaN and the infinities."""
    raise ValueError(f"'{name}' is not a valid JSON value")


def loads_strict(text: str) -> Any:
    """json.loads without the NaN/Infinity extensions.

    Raises:
        ValueError: If text is not standard JSON
    """
    return json.loads(text, parse_constant=reject_constant)


def parse_json_text(text: str, source: str = "<string>") -> Any:
    """Parse JSON text.

    Raises:
        JsonReadError: If text is not valid JSON
    """
    try:
        return loads_strict(text)
    except ValueError as e:
        raise JsonReadError(source, f"failed to parse JSON: {e}")


def read_json_file(path: Union[str, Path]) -> Any:
    """Read and parse a JSON file.

    Raises:
        JsonReadError: If the file cannot be read or is not valid JSON
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise JsonReadError(str(path), f"failed to read file: {e}")
    return parse_json_text(text, str(path))


def read_json_stdin(stream: Optional[TextIO] = None) -> Any:
    """Read and parse a JSON document from stdin (or the given stream)."""
    stream = stream or sys.stdin
    try:
        text = stream.read()
    except (OSError, UnicodeDecodeError) as e:
        raise JsonReadError("<stdin>", f"failed to read from STDIN: {e}")
    return parse_json_text(text, "<stdin>")


def dump_json(value: Any) -> str:
    """Pretty-print a JSON value with two-space indentation.

    Raises:
        JsonWriteError: If value holds NaN, an infinity or a non-JSON type
    """
    try:
        return json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
    except (ValueError, TypeError) as e:
        raise JsonWriteError(str(e))
