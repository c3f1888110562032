"""jsonatr: JSON-to-JSON transformation driven by a spec of named inputs."""

from .builtins import Builtin, BuiltinRegistry, is_truthy
from .cli import main
from .command import CommandRunner, decode_command_output
from .config import EngineConfig
from .errors import (
    BuiltinError,
    CircularUseError,
    CommandError,
    ConflictingInputError,
    DuplicateOutputError,
    EvaluationError,
    ExpressionSyntaxError,
    InputDefinitionError,
    InputResolutionError,
    InputSourceError,
    JsonatrError,
    JsonReadError,
    JsonWriteError,
    MissingContextError,
    MissingOutputError,
    QueryError,
    ResolutionDepthError,
    SpecError,
    SpecParseError,
    UnknownInputError,
)
from .evaluator import Evaluator
from .expression import Expression, ExpressionParser, Transform, parse_expression
from .loader import SpecLoader, load_spec
from .query import select
from .scope import ResolutionState, ScopeStack
from .spec import Input, InputKind, Spec

__all__ = [
    # CLI
    "main",
    # Spec
    "Input",
    "InputKind",
    "Spec",
    "SpecLoader",
    "load_spec",
    # Evaluation
    "EngineConfig",
    "Evaluator",
    "Expression",
    "ExpressionParser",
    "Transform",
    "parse_expression",
    "select",
    "ScopeStack",
    "ResolutionState",
    "CommandRunner",
    "decode_command_output",
    # Builtins
    "Builtin",
    "BuiltinRegistry",
    "is_truthy",
    # Errors
    "JsonatrError",
    "JsonReadError",
    "JsonWriteError",
    "SpecError",
    "SpecParseError",
    "InputDefinitionError",
    "ConflictingInputError",
    "DuplicateOutputError",
    "MissingOutputError",
    "CircularUseError",
    "EvaluationError",
    "ExpressionSyntaxError",
    "QueryError",
    "MissingContextError",
    "BuiltinError",
    "InputResolutionError",
    "UnknownInputError",
    "InputSourceError",
    "CommandError",
    "ResolutionDepthError",
]
