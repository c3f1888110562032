"""Spec documents: input declarations, output template and merging."""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from .builtins import BuiltinRegistry
from .errors import (
    ConflictingInputError,
    DuplicateOutputError,
    InputDefinitionError,
    SpecParseError,
)

if TYPE_CHECKING:
    from .loader import SpecLoader

_NAME_PATTERN = re.compile(r"\w+")


class InputKind(str, Enum):
    """Where an input's value comes from."""

    INLINE = "INLINE"  # the source itself is a template
    FILE = "FILE"  # the source is a path to a JSON template file
    COMMAND = "COMMAND"  # the source is a command line; stdout is JSON or text


@dataclass
class Input:
    """A named input declaration.

    Merging accepts a repeated declaration only when every field has the
    same JSON form (see same_declaration).

    Attributes:
        name: Identifier used in '$name' references and '| name' calls
        kind: How source is interpreted
        source: Template (INLINE), path (FILE) or command line (COMMAND)
        lets: Local bindings evaluated in the caller's context, or None
        stdin: Whether a COMMAND receives the context on stdin
        args: Parameter names bound from call arguments
    """

    name: str
    kind: InputKind
    source: Any
    lets: Optional[Dict[str, Any]] = None
    stdin: bool = True
    args: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, index: int = 0, origin: str = "<spec>") -> "Input":
        """Build an Input from its JSON declaration.

        Args:
            data: One element of a spec's "input" array
            index: Position in that array (for error messages)
            origin: Where the spec came from (for error messages)

        Raises:
            InputDefinitionError: If the declaration is invalid
        """
        if not isinstance(data, dict):
            raise InputDefinitionError(
                f"input at index {index} in {origin} must be an object, "
                f"got: {type(data).__name__}"
            )

        name = data.get("name")
        if not isinstance(name, str) or not _NAME_PATTERN.fullmatch(name):
            raise InputDefinitionError(
                f"input at index {index} in {origin} needs an identifier 'name', "
                f"got: {name!r}"
            )

        raw_kind = data.get("kind")
        try:
            kind = InputKind(raw_kind)
        except ValueError:
            valid = ", ".join(k.value for k in InputKind)
            raise InputDefinitionError(
                f"invalid kind {raw_kind!r} of input '{name}'. Must be one of: {valid}",
                input_name=name,
            )

        if "source" not in data:
            raise InputDefinitionError(
                f"input '{name}' is missing required 'source' field", input_name=name
            )

        lets = data.get("let")
        if lets is not None and (
            not isinstance(lets, dict) or not all(isinstance(k, str) for k in lets)
        ):
            raise InputDefinitionError(
                f"wrong 'let' clause of input '{name}': should be an object",
                input_name=name,
            )

        stdin = data.get("stdin", True)
        if not isinstance(stdin, bool):
            raise InputDefinitionError(
                f"'stdin' of input '{name}' must be a boolean", input_name=name
            )

        args = data.get("args", [])
        if not isinstance(args, list) or not all(
            isinstance(a, str) and _NAME_PATTERN.fullmatch(a) for a in args
        ):
            raise InputDefinitionError(
                f"'args' of input '{name}' must be a list of identifiers",
                input_name=name,
            )

        return cls(
            name=name,
            kind=kind,
            source=data["source"],
            lets=lets,
            stdin=stdin,
            args=list(args),
        )

    def same_declaration(self, other: "Input") -> bool:
        """Whether other declares exactly the same input.

        Values are compared by their JSON form, so 1, 1.0 and true are
        all different sources.
        """
        return _json_form(self) == _json_form(other)


def _json_form(inp: Input) -> str:
    return json.dumps(asdict(inp), sort_keys=True, default=repr)


@dataclass
class Spec:
    """A transformation spec: named inputs plus an output template.

    Attributes:
        uses: Paths of included specs, as declared
        inputs: Input declarations by name, in declaration order
        output: The output template, or None if not defined yet
        description: Optional free text
    """

    uses: List[str] = field(default_factory=list)
    inputs: Dict[str, Input] = field(default_factory=dict)
    output: Any = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, origin: str = "<spec>") -> "Spec":
        """Build a spec from a parsed document, without following 'use'.

        Raises:
            SpecParseError: If the document shape is wrong
            SpecError: If an input or the output is invalid
        """
        if not isinstance(data, dict):
            raise SpecParseError(origin, "spec must be a JSON object")

        uses = data.get("use") or []
        if not isinstance(uses, list) or not all(isinstance(u, str) for u in uses):
            raise SpecParseError(origin, "'use' must be a list of file paths")

        description = data.get("description")
        if description is not None and not isinstance(description, str):
            raise SpecParseError(origin, "'description' must be a string")

        inputs_data = data.get("input") or []
        if not isinstance(inputs_data, list):
            raise SpecParseError(origin, "'input' must be a list of input declarations")

        spec = cls(uses=list(uses), description=description)
        for idx, item in enumerate(inputs_data):
            spec.add_input(Input.from_dict(item, idx, origin))
        if data.get("output") is not None:
            spec.add_output(data["output"])
        return spec

    def add_input(self, inp: Input) -> None:
        """Register an input declaration.

        Re-adding an identical declaration is a no-op.

        Raises:
            InputDefinitionError: If the name collides with a builtin
            ConflictingInputError: If a different declaration exists
        """
        if BuiltinRegistry.has(inp.name):
            raise InputDefinitionError(
                f"can't define input '{inp.name}' because of the builtin "
                f"function with the same name",
                input_name=inp.name,
            )
        existing = self.inputs.get(inp.name)
        if existing is not None and not existing.same_declaration(inp):
            raise ConflictingInputError(inp.name)
        self.inputs[inp.name] = inp

    def add_output(self, output: Any) -> None:
        """Set the output template.

        Raises:
            DuplicateOutputError: If an output is already defined
        """
        if self.output is not None:
            raise DuplicateOutputError()
        self.output = output

    def get_input(self, name: str) -> Optional[Input]:
        """Get an input declaration by name."""
        return self.inputs.get(name)

    def merge(self, other: "Spec") -> None:
        """Merge another spec's output and inputs into this one."""
        if other.output is not None:
            self.add_output(other.output)
        for inp in other.inputs.values():
            self.add_input(inp)
        if not self.description and other.description:
            self.description = other.description

    def add_use(
        self,
        path: Union[str, Path],
        loader: Optional["SpecLoader"] = None,
    ) -> None:
        """Load a spec file (with its own 'use' entries) and merge it in."""
        # Import here to avoid circular imports
        from .loader import SpecLoader

        loader = loader or SpecLoader()
        self.merge(loader.load(path))
