"""Diagnostic output on stderr.

Stdout carries only the transformed JSON document, so everything the engine
has to say about soft failures, tracing and fatal errors goes through the
shared stderr console here.

Usage:
    from jsonatr.display import get_display

    display = get_display()
    display.print_warning("failed to apply builtin transform 'unwrap'")
    display.print_error("no output specified")
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape

# Shared console instance
console = Console(stderr=True)


class Display:
    """Singleton wrapper around the stderr console."""

    _instance: Optional["Display"] = None

    @classmethod
    def get_instance(cls) -> "Display":
        """Get or create the singleton display instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (useful for testing)."""
        cls._instance = None

    @property
    def console(self) -> Console:
        """Get the Rich console instance."""
        return console

    def print_warning(self, message: str) -> None:
        """Report a soft failure; evaluation continues."""
        self.console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_error(self, message: str) -> None:
        """Report a fatal error as a single 'Error: <message>' line."""
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def print_debug(self, message: str) -> None:
        """Trace line for verbose mode."""
        self.console.print(f"[dim]{escape(message)}[/dim]")


def get_display() -> Display:
    """Get the shared display instance."""
    return Display.get_instance()
