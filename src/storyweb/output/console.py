"""Rich Console factory and theme for storyweb output.

Consoles render into a StringIO buffer so every renderer keeps the
``str``-returning contract.  Rich drops colour codes automatically when
not attached to a terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

STORYWEB_THEME = Theme(
    {
        "sw.ok": "bold green",
        "sw.error": "bold red",
        "sw.warning": "bold yellow",
        "sw.op": "bold cyan",
        "sw.key": "dim",
        "sw.id": "bold blue",
        "sw.path": "dim",
        "sw.title": "bold",
        "sw.type.note": "green",
        "sw.type.scene": "red",
        "sw.number": "magenta",
    }
)

_TYPE_STYLES: dict[str, str] = {
    "note": "sw.type.note",
    "scene": "sw.type.scene",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=STORYWEB_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_type(node_type: str) -> str:
    return _TYPE_STYLES.get(node_type, "")
