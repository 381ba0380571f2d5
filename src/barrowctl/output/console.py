"""Rich Console factory and theme for barrowctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

BARROW_THEME = Theme(
    {
        "barrow.ok": "bold green",
        "barrow.error": "bold red",
        "barrow.warning": "bold yellow",
        "barrow.op": "bold cyan",
        "barrow.key": "dim",
        "barrow.id": "bold blue",
        "barrow.path": "dim",
        "barrow.name": "bold",
        "barrow.coord": "magenta",
        "barrow.role.central": "bold yellow",
        "barrow.role.normal": "",
        "barrow.size.small": "dim",
        "barrow.size.medium": "",
        "barrow.size.large": "bold",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=BARROW_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_role(role: str) -> str:
    """Return the Rich style name for a cavern role."""
    return f"barrow.role.{role}" if role in ("central", "normal") else ""


def style_for_size(size_class: str) -> str:
    """Return the Rich style name for a cavern size class."""
    return f"barrow.size.{size_class}" if size_class in ("small", "medium", "large") else ""
