"""JSONPath queries over JSON values."""

import copy
from functools import lru_cache
from typing import Any, List

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse as parse_jsonpath
from jsonpath_ng.jsonpath import JSONPath

from .errors import QueryError


@lru_cache(maxsize=256)
def compile_path(path: str) -> JSONPath:
    """Compile a '$'-rooted JSONPath (extended syntax, with filters).

    Raises:
        QueryError: If the path does not parse
    """
    try:
        return parse_jsonpath(path)
    except (JSONPathError, ValueError, TypeError) as e:
        raise QueryError(path, str(e))


def select(value: Any, path: str) -> List[Any]:
    """Return copies of all values matched by path, in document order.

    Raises:
        QueryError: If the path is invalid or cannot be applied
    """
    expr = compile_path(path)
    try:
        matches = expr.find(value)
    except (JSONPathError, ValueError, TypeError, KeyError, AttributeError) as e:
        raise QueryError(path, str(e))
    return [copy.deepcopy(match.value) for match in matches]
