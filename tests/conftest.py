"""Shared test fixtures and configuration."""

import json
from pathlib import Path
from typing import Any, Callable
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_display():
    """Auto-mock the display for all tests.

    This prevents actual terminal output during tests and lets tests
    assert on warnings and errors.
    """
    mock_display = MagicMock()
    mock_display.console = MagicMock()

    with patch("jsonatr.display.Display.get_instance", return_value=mock_display):
        with patch("jsonatr.evaluator.get_display", return_value=mock_display):
            with patch("jsonatr.cli.get_display", return_value=mock_display):
                yield mock_display


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, Any], Path]:
    """Write a JSON document under tmp_path and return its path."""

    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path

    return _write
