"""Template evaluation: walking the output tree and resolving inputs."""

import copy
from typing import Any, Dict, Optional, Sequence

from .builtins import BuiltinRegistry
from .command import CommandRunner
from .config import EngineConfig
from .display import get_display
from .errors import (
    EvaluationError,
    InputResolutionError,
    InputSourceError,
    JsonReadError,
    MissingContextError,
    MissingOutputError,
    UnknownInputError,
)
from .expression import Expression, Transform, parse_expression
from .jsonio import dump_json, read_json_file
from .query import select
from .scope import ResolutionState, ScopeStack
from .spec import Input, InputKind, Spec


class Evaluator:
    """Evaluates a spec's output template against a main input value.

    String leaves that parse as expressions are replaced by their values;
    everything else is rebuilt as is. Evaluation of a single string can
    fail softly (EvaluationError): the string is then kept verbatim and a
    warning is printed. Input resolution errors are hard and propagate.

    Attributes:
        spec: The merged spec providing inputs and the output template
        config: Engine settings
        runner: Runs COMMAND inputs
        scopes: Local bindings of the inputs currently being resolved
        state: Chain of inputs currently being resolved
    """

    def __init__(
        self,
        spec: Spec,
        config: Optional[EngineConfig] = None,
        runner: Optional[CommandRunner] = None,
    ) -> None:
        self.spec = spec
        self.config = config or EngineConfig()
        self.runner = runner or CommandRunner(timeout=self.config.command_timeout)
        self.scopes = ScopeStack()
        self.state = ResolutionState(max_depth=self.config.max_depth)

    # =========================================================================
    # Entry points
    # =========================================================================

    def render(self, main_input: Any = None) -> Any:
        """Evaluate the output template and return the resulting value.

        Args:
            main_input: Initial context value ('$'); None means no context

        Raises:
            MissingOutputError: If the spec has no output
            JsonatrError: On any hard error during evaluation
        """
        if self.spec.output is None:
            raise MissingOutputError()
        self.scopes.clear()
        self.state.clear()
        return self.transform_value(self.spec.output, main_input)

    def transform(self, main_input: Any = None) -> str:
        """Evaluate the output template and pretty-print it as JSON."""
        return dump_json(self.render(main_input))

    # =========================================================================
    # Tree walk
    # =========================================================================

    def transform_value(self, template: Any, context: Any) -> Any:
        """Evaluate a template against a context value.

        Arrays and objects are rebuilt element by element, in order, each
        element evaluated against the same context.
        """
        if isinstance(template, str):
            try:
                return self.evaluate_string(template, context)
            except EvaluationError as e:
                self.warn(str(e))
                return template
        if isinstance(template, list):
            return [self.transform_value(item, context) for item in template]
        if isinstance(template, dict):
            return {
                key: self.transform_value(value, context)
                for key, value in template.items()
            }
        return template

    def evaluate_string(self, text: str, context: Any) -> Any:
        """Evaluate one template string.

        Returns:
            The expression's value, or text itself if it is not an expression

        Raises:
            EvaluationError: On a soft failure (caller keeps text verbatim)
            JsonatrError: On a hard failure
        """
        expr = parse_expression(text)
        if expr is None:
            return text

        value = self._base_value(expr, text, context)
        if expr.jpath:
            value = select(value, expr.query_path)
        for transform in expr.transforms:
            value = self.apply_transform(transform, value)
        return value

    def _base_value(self, expr: Expression, text: str, context: Any) -> Any:
        if not expr.input:
            if context is None:
                raise MissingContextError(text)
            return copy.deepcopy(context)
        return self.apply_input_by_name(expr.input, context)

    def apply_transform(self, transform: Transform, value: Any) -> Any:
        """Apply one pipeline step: a builtin, or an input called on value."""
        builtin = BuiltinRegistry.get(transform.name)
        if builtin is not None:
            return builtin.apply(self, value, transform.args)
        return self.apply_input_by_name(transform.name, value, transform.args)

    # =========================================================================
    # Input resolution
    # =========================================================================

    def apply_input_by_name(
        self,
        name: str,
        context: Any,
        args: Optional[Sequence[str]] = None,
    ) -> Any:
        """Resolve a name: innermost local binding first, then the inputs.

        Args:
            name: Local binding or input name
            context: Value the input is evaluated against
            args: Call arguments, or None when not called with parentheses

        Raises:
            UnknownInputError: If name is neither bound nor declared
            InputResolutionError: If the input cannot be resolved, or a
                local binding is called with arguments
            ResolutionDepthError: If inputs nest too deeply
        """
        found, value = self.scopes.lookup(name)
        if found:
            if args is not None:
                raise InputResolutionError(
                    f"'{name}' is a local binding and takes no arguments",
                    input_name=name,
                )
            return copy.deepcopy(value)

        inp = self.spec.get_input(name)
        if inp is None:
            raise UnknownInputError(name)

        with self.state.entered(name):
            self.debug(f"resolving {inp.kind.value} input '{name}'")
            bindings = self._bindings(inp, context, args)
            if bindings is None:
                return self.resolve_input(inp, context)
            with self.scopes.frame(bindings):
                return self.resolve_input(inp, context)

    def _bindings(
        self,
        inp: Input,
        context: Any,
        args: Optional[Sequence[str]],
    ) -> Optional[Dict[str, Any]]:
        """Build the scope frame for an input, or None if it needs none.

        'let' templates are evaluated in the caller's scope, before the
        new frame is pushed.
        """
        if inp.lets is None and args is None:
            return None

        bindings: Dict[str, Any] = {}
        for key, template in (inp.lets or {}).items():
            bindings[key] = self.transform_value(template, context)

        if args is not None:
            if len(args) != len(inp.args):
                raise InputResolutionError(
                    f"input '{inp.name}' expects {len(inp.args)} argument(s), "
                    f"got {len(args)}",
                    input_name=inp.name,
                )
            bindings.update(zip(inp.args, args))

        return bindings

    def resolve_input(self, inp: Input, context: Any) -> Any:
        """Produce an input's value by kind.

        INLINE and FILE sources are templates evaluated against context;
        COMMAND output is used as is.

        Raises:
            InputSourceError: If the source is unusable
            CommandError: If the command fails
        """
        if inp.kind is InputKind.INLINE:
            return self.transform_value(inp.source, context)

        if not isinstance(inp.source, str):
            raise InputSourceError(
                f"non-string provided as source for input '{inp.name}'",
                input_name=inp.name,
            )

        if inp.kind is InputKind.FILE:
            try:
                template = read_json_file(inp.source)
            except JsonReadError as e:
                raise InputSourceError(
                    f"failed to load file for input '{inp.name}': {e.reason}",
                    input_name=inp.name,
                )
            return self.transform_value(template, context)

        return self.runner.run(inp.name, inp.source, context, pass_stdin=inp.stdin)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def warn(self, message: str) -> None:
        """Report a soft failure unless quiet."""
        if not self.config.quiet:
            get_display().print_warning(message)

    def debug(self, message: str) -> None:
        """Trace line, shown only in verbose mode."""
        if self.config.verbose and not self.config.quiet:
            get_display().print_debug(message)
