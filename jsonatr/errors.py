"""Custom exceptions for spec loading and template evaluation."""

from typing import List, Optional


class JsonatrError(Exception):
    """Base exception for all jsonatr errors."""

    pass


class JsonReadError(JsonatrError):
    """Raised when a JSON document cannot be read or parsed.

    Attributes:
        source: File path or "<stdin>"
        reason: The underlying read or parse error message
    """

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"failed to read JSON from {source}: {reason}")


class JsonWriteError(JsonatrError):
    """Raised when a result cannot be written as standard JSON.

    Attributes:
        reason: The underlying serialization error message
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"failed to serialize result as JSON: {reason}")


# =============================================================================
# Spec errors
# =============================================================================


class SpecError(JsonatrError):
    """Base class for errors in spec documents and their merging."""

    pass


class SpecParseError(SpecError):
    """Raised when a spec file cannot be parsed.

    Attributes:
        file_path: Path to the file that failed to parse
        parse_error: The underlying parse error message
    """

    def __init__(self, file_path: str, parse_error: str):
        self.file_path = file_path
        self.parse_error = parse_error
        super().__init__(f"failed to parse spec {file_path}: {parse_error}")


class InputDefinitionError(SpecError):
    """Raised when an input declaration is invalid.

    Attributes:
        input_name: Name of the offending input, if known
    """

    def __init__(self, message: str, input_name: Optional[str] = None):
        self.input_name = input_name
        super().__init__(message)


class ConflictingInputError(SpecError):
    """Raised when two merged specs declare the same input differently."""

    def __init__(self, input_name: str):
        self.input_name = input_name
        super().__init__(f"found conflicting definition of input '{input_name}'")


class DuplicateOutputError(SpecError):
    """Raised when more than one merged spec defines an output."""

    def __init__(self) -> None:
        super().__init__("double definition of output")


class MissingOutputError(SpecError):
    """Raised when a transform is requested but no output was defined."""

    def __init__(self) -> None:
        super().__init__("no output specified")


class CircularUseError(SpecError):
    """Raised when a spec file transitively uses itself.

    Attributes:
        chain: The file chain that forms the cycle
    """

    def __init__(self, chain: List[str]):
        self.chain = chain
        super().__init__(f"circular 'use' detected: {' → '.join(chain)}")


# =============================================================================
# Evaluation errors (soft: the evaluator falls back to the literal text)
# =============================================================================


class EvaluationError(JsonatrError):
    """Base class for soft failures while evaluating one template string."""

    pass


class ExpressionSyntaxError(EvaluationError):
    """Raised when a '$'-prefixed string is not a well-formed expression.

    Attributes:
        text: The original template string
    """

    def __init__(self, text: str, message: str):
        self.text = text
        super().__init__(f"malformed expression '{text}': {message}")


class QueryError(EvaluationError):
    """Raised when a JSONPath query cannot be compiled or applied.

    Attributes:
        path: The full ('$'-prefixed) JSONPath
        reason: The underlying engine error
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"failed to apply JsonPath expression '{path}': {reason}")


class MissingContextError(EvaluationError):
    """Raised when '$' without an input name is used with no context value."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"'{text}' refers to the context value, but there is none")


class BuiltinError(EvaluationError):
    """Raised when a builtin's preconditions are not met.

    Attributes:
        builtin: Name of the builtin
        reason: What was wrong with the value or arguments
    """

    def __init__(self, builtin: str, reason: str):
        self.builtin = builtin
        self.reason = reason
        super().__init__(f"failed to apply builtin transform '{builtin}': {reason}")


# =============================================================================
# Resolution errors (hard: they abort the transform)
# =============================================================================


class InputResolutionError(JsonatrError):
    """Base class for failures while resolving a named input.

    Attributes:
        input_name: Name of the input being resolved
    """

    def __init__(self, message: str, input_name: Optional[str] = None):
        self.input_name = input_name
        super().__init__(message)


class UnknownInputError(InputResolutionError):
    """Raised when a reference names neither a local, a builtin nor an input."""

    def __init__(self, input_name: str):
        super().__init__(
            f"found reference to unknown input '{input_name}'", input_name=input_name
        )


class InputSourceError(InputResolutionError):
    """Raised when an input's source is unusable (wrong type, unreadable file)."""

    pass


class CommandError(InputResolutionError):
    """Raised when a COMMAND input cannot be run or exits unsuccessfully.

    Attributes:
        command: The command line from the input's source
        returncode: Exit status, or None if the process never ran
    """

    def __init__(
        self,
        input_name: str,
        command: str,
        reason: str,
        returncode: Optional[int] = None,
    ):
        self.command = command
        self.returncode = returncode
        super().__init__(
            f"failed to execute command for input '{input_name}': {reason}",
            input_name=input_name,
        )


class ResolutionDepthError(JsonatrError):
    """Raised when input resolutions nest deeper than the configured limit.

    Attributes:
        chain: Input names currently being resolved, outermost first
        max_depth: The configured limit
    """

    def __init__(self, chain: List[str], max_depth: int):
        self.chain = chain
        self.max_depth = max_depth
        super().__init__(
            f"maximum input nesting depth ({max_depth}) exceeded. "
            f"Current chain: {' → '.join(chain)}"
        )
