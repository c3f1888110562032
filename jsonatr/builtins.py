"""Builtin pipeline functions and their registry.

A builtin receives the current pipeline value and the call arguments and
returns the new value. When its preconditions are not met it raises
BuiltinError, a soft failure: the whole expression is then emitted
verbatim.

To add a new builtin:
1. Create a class inheriting from Builtin
2. Implement the name property and the apply method
3. Register it at the bottom of this module
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from .errors import BuiltinError, InputResolutionError

if TYPE_CHECKING:
    from .evaluator import Evaluator


def is_truthy(value: Any) -> bool:
    """JSON truthiness: null, false, zero and empty values are false."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, (str, list, dict)):
        return len(value) > 0
    return bool(value)


def _kind(value: Any) -> str:
    if isinstance(value, list):
        return f"array of {len(value)}"
    return type(value).__name__


class Builtin(ABC):
    """Abstract base class for builtin pipeline functions."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier used in pipelines (e.g., 'unwrap')."""
        pass

    @abstractmethod
    def apply(
        self,
        evaluator: "Evaluator",
        value: Any,
        args: Optional[Sequence[str]],
    ) -> Any:
        """Apply the builtin.

        Args:
            evaluator: Evaluator to call back into for named inputs
            value: Current pipeline value
            args: Call arguments, or None when called without parentheses

        Returns:
            The new pipeline value

        Raises:
            BuiltinError: If the value or arguments are not acceptable
        """
        pass


class UnwrapBuiltin(Builtin):
    """Turns a singleton array into its only element."""

    @property
    def name(self) -> str:
        return "unwrap"

    def apply(self, evaluator, value, args):
        if not isinstance(value, list) or len(value) != 1:
            raise BuiltinError(
                self.name, f"expected an array of one element, got {_kind(value)}"
            )
        return value[0]


class MapBuiltin(Builtin):
    """Applies a named input to every element of an array.

    A failing element is kept as is and reported, so one bad element
    never fails the whole map.
    """

    @property
    def name(self) -> str:
        return "map"

    def apply(self, evaluator, value, args):
        if not isinstance(value, list):
            raise BuiltinError(self.name, f"expected an array, got {_kind(value)}")
        if args is None or len(args) != 1:
            raise BuiltinError(self.name, "expected exactly one input name argument")

        input_name = args[0]
        results: List[Any] = []
        for item in value:
            try:
                results.append(evaluator.apply_input_by_name(input_name, item))
            except InputResolutionError as e:
                evaluator.warn(
                    f"failed to apply input transform '{input_name}'; reason: {e}"
                )
                results.append(item)
        return results


class IfElseBuiltin(Builtin):
    """Resolves the first or second named input depending on truthiness."""

    @property
    def name(self) -> str:
        return "ifelse"

    def apply(self, evaluator, value, args):
        if args is None or len(args) != 2:
            raise BuiltinError(
                self.name, "expected two input name arguments (then, else)"
            )
        branch = args[0] if is_truthy(value) else args[1]
        return evaluator.apply_input_by_name(branch, value)


class BuiltinRegistry:
    """Registry for builtin pipeline functions.

    Builtins take precedence over inputs in pipelines, and inputs may
    not be declared with a builtin's name.
    """

    _builtins: Dict[str, Builtin] = {}

    @classmethod
    def register(cls, builtin: Builtin) -> None:
        """Register a builtin instance."""
        cls._builtins[builtin.name] = builtin

    @classmethod
    def get(cls, name: str) -> Optional[Builtin]:
        """Get a builtin by name, or None."""
        return cls._builtins.get(name)

    @classmethod
    def has(cls, name: str) -> bool:
        """Whether name is a registered builtin."""
        return name in cls._builtins

    @classmethod
    def available(cls) -> List[str]:
        """List all registered builtin names."""
        return list(cls._builtins.keys())


BuiltinRegistry.register(UnwrapBuiltin())
BuiltinRegistry.register(MapBuiltin())
BuiltinRegistry.register(IfElseBuiltin())
