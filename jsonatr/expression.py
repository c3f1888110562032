"""Parser for template reference expressions.

An expression is a template string of the form

    $<input><jsonpath> [| <transform>[(<arg>, ...)]]*

- <input> is an identifier naming an input or a local binding; when empty
  the expression refers to the current context value.
- <jsonpath> is an optional JSONPath continuation (".field", "[0]",
  "..name", "[?(@.x > 1)]") which is evaluated as if rooted at "$".
- Each "| transform" names a builtin or an input used as a callable. The
  argument list is optional; "f()" passes zero arguments while "f" passes
  none at all.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import ExpressionSyntaxError

_INPUT_PATTERN = re.compile(r"^\$(\w*)")

# Matches the last pipeline segment of the remaining text
_TRANSFORM_PATTERN = re.compile(
    r"""
    [ \t]*\|[ \t]*
    (?P<NAME>\w+)                  # transform name
    [ \t]*
    (?:\((?P<ARGS>[^()]*)\))?      # optional argument list
    [ \t]*$
    """,
    re.VERBOSE,
)

_ARG_SEPARATOR = re.compile(r"[ \t]*,[ \t]*")

_BRACKETS = {"[": "]", "(": ")"}


@dataclass(frozen=True)
class Transform:
    """One pipeline step.

    Attributes:
        name: Builtin or input name
        args: Call arguments, or None when written without parentheses
    """

    name: str
    args: Optional[Tuple[str, ...]] = None

    @property
    def arg_list(self) -> List[str]:
        """Arguments as a list, empty when there were no parentheses."""
        return list(self.args) if self.args is not None else []


@dataclass(frozen=True)
class Expression:
    """A parsed reference expression."""

    input: str
    jpath: str = ""
    transforms: Tuple[Transform, ...] = ()

    @property
    def query_path(self) -> str:
        """The JSONPath as handed to the query engine."""
        return "$" + self.jpath


class ExpressionParser:
    """Parses template strings into Expression objects.

    parse() distinguishes strings that are not expressions at all (None)
    from strings that start like one but are malformed
    (ExpressionSyntaxError).
    """

    def parse(self, text: str) -> Optional[Expression]:
        """Parse a template string.

        Args:
            text: A string leaf of a template

        Returns:
            The parsed Expression, or None if text is not an expression

        Raises:
            ExpressionSyntaxError: If text starts with '$' but is malformed
        """
        input_match = _INPUT_PATTERN.match(text)
        if input_match is None:
            return None

        start = input_match.end()
        transforms, end = self._parse_pipeline(text, start)
        jpath = self._parse_path(text, text[start:end])

        return Expression(
            input=input_match.group(1),
            jpath=jpath,
            transforms=tuple(transforms),
        )

    def _parse_pipeline(self, text: str, start: int) -> Tuple[List[Transform], int]:
        """Strip pipeline segments off the end of text, right to left.

        Returns:
            Transforms in application order, and the end offset of the
            text preceding the pipeline
        """
        transforms: List[Transform] = []
        end = len(text)

        while end > start:
            match = _TRANSFORM_PATTERN.search(text[start:end])
            if match is None:
                break
            args = self._parse_args(match.group("ARGS"))
            transforms.insert(0, Transform(match.group("NAME"), args))
            end = start + match.start()

        return transforms, end

    def _parse_args(self, raw: Optional[str]) -> Optional[Tuple[str, ...]]:
        if raw is None:
            return None
        raw = raw.strip()
        if not raw:
            return ()
        return tuple(_ARG_SEPARATOR.split(raw))

    def _parse_path(self, text: str, path: str) -> str:
        """Validate the JSONPath continuation between input and pipeline."""
        path = path.rstrip()
        if not path:
            return ""

        if path[0] not in ".[":
            raise ExpressionSyntaxError(
                text, f"unexpected '{path[0]}' after input name"
            )

        # A '|' outside brackets and quotes is a pipeline segment that
        # failed to parse, e.g. "$x | f(a"
        closers: List[str] = []
        quote: Optional[str] = None
        for char in path:
            if quote is not None:
                if char == quote:
                    quote = None
            elif char in ("'", '"'):
                quote = char
            elif char in _BRACKETS:
                closers.append(_BRACKETS[char])
            elif closers and char == closers[-1]:
                closers.pop()
            elif char == "|" and not closers:
                raise ExpressionSyntaxError(text, "malformed pipeline segment")

        if quote is not None or closers:
            raise ExpressionSyntaxError(text, "unbalanced brackets or quotes in path")

        return path


_parser = ExpressionParser()


def parse_expression(text: str) -> Optional[Expression]:
    """Parse text with the shared parser (see ExpressionParser.parse)."""
    return _parser.parse(text)
