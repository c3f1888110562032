"""Helpers for building specs in tests."""

import shlex
import sys
from typing import Any, Dict, List, Optional

from jsonatr.config import EngineConfig
from jsonatr.evaluator import Evaluator
from jsonatr.spec import Spec


def python_command(code: str) -> str:
    """Command line running a Python snippet with the current interpreter."""
    return f"{shlex.quote(sys.executable)} -c {shlex.quote(code)}"


def inline(name: str, source: Any, **kwargs: Any) -> Dict[str, Any]:
    """Raw declaration of an INLINE input."""
    return {"name": name, "kind": "INLINE", "source": source, **kwargs}


def make_spec(
    output: Any = None,
    inputs: Optional[List[Dict[str, Any]]] = None,
) -> Spec:
    """Build a spec from an output template and raw input declarations."""
    data: Dict[str, Any] = {"input": inputs or []}
    if output is not None:
        data["output"] = output
    return Spec.from_dict(data)


def make_evaluator(
    output: Any = None,
    inputs: Optional[List[Dict[str, Any]]] = None,
    config: Optional[EngineConfig] = None,
) -> Evaluator:
    """Build an evaluator for an output template and raw inputs."""
    return Evaluator(make_spec(output, inputs), config)


def render(
    output: Any,
    inputs: Optional[List[Dict[str, Any]]] = None,
    main_input: Any = None,
) -> Any:
    """Render an output template with the given inputs."""
    return make_evaluator(output, inputs).render(main_input)
