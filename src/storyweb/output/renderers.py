"""Operation-specific rich renderers for ServiceResult.

Renderers write to a StringIO-backed console and are dispatched on
``result.op`` by :func:`render_result`; unknown ops fall back to a
key-value listing.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from storyweb.output.console import create_console, get_output, style_for_type

if TYPE_CHECKING:
    from rich.console import Console

    from storyweb.services.result import ServiceResult

type Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* to text (plain when no terminal is attached)."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: item ids, or a status line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if "id" in item)
    if result.op == "render":
        return str(result.data.get("output", ""))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="sw.ok"), Text(f"  {result.op}", style="sw.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="sw.key")
    if key in ("output", "path"):
        v = Text(str(value), style="sw.path")
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        v = Text(str(value), style="sw.number")
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block, including the telemetry span tree."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)
    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span_data.get('name', '?')}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _node_table(items: list[dict[str, Any]], *, extra_columns: tuple[str, ...] = ()) -> Table:
    """Build a table of graph nodes."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="sw.id", no_wrap=True)
    table.add_column("Title", style="sw.title")
    table.add_column("Type")
    for col in extra_columns:
        table.add_column(col.replace("_", " ").title(), justify="right")

    for item in items:
        node_type = str(item.get("type", ""))
        row: list[str | Text] = [
            str(item.get("id", "")),
            str(item.get("title", "")),
            Text(node_type, style=style_for_type(node_type)),
        ]
        row.extend(str(item.get(col, "")) for col in extra_columns)
        table.add_row(*row)
    return table


def _link_summary(console: Console, link_types: dict[str, int]) -> None:
    summary = ", ".join(f"{name} {count}" for name, count in link_types.items())
    _field(console, "link_types", summary)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text("ERROR", style="sw.error"),
        Text(f"  {result.op}{code}", style="sw.op"),
        Text(msg),
    )
    if err and err.detail:
        errors = err.detail.get("errors")
        if isinstance(errors, list):
            for entry in errors:
                console.print(Text(f"    {entry.get('loc', '?')}: {entry.get('msg', '')}"))
        if verbose:
            console.print(Text("  detail:", style="dim"))
            for k, v in err.detail.items():
                if k != "errors":
                    console.print(f"    {k}: {v}")


# ── Graph renderers ───────────────────────────────────────────────────


def _render_build(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("notes", "scenes", "links", "groups"):
        _field(console, key, d.get(key, 0))
    _link_summary(console, d.get("link_types", {}))
    isolated = d.get("isolated", [])
    if isolated:
        _field(console, "isolated", ", ".join(isolated))
    items = d.get("items", [])
    if items:
        console.print()
        console.print(_node_table(items, extra_columns=("connections", "group")))
    if verbose:
        _render_meta(console, result)


def _render_visible(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "visible", f"{d.get('count', 0)} of {d.get('total', 0)} nodes")
    _field(console, "links", d.get("links", 0))
    _link_summary(console, d.get("link_types", {}))
    if verbose:
        filters = d.get("filters", {})
        off = [name for name, value in filters.items() if value is False]
        if off:
            _field(console, "off", ", ".join(off))
        hidden = filters.get("hidden_character_ids") or []
        if hidden:
            _field(console, "hidden_characters", ", ".join(hidden))
    items = d.get("items", [])
    if items:
        console.print()
        console.print(_node_table(items, extra_columns=("connections",)))
    if verbose:
        _render_meta(console, result)


def _render_layout(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "ticks", d.get("ticks", 0))
    _field(console, "settled", d.get("settled", False))
    items = d.get("items", [])
    if items:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("ID", style="sw.id", no_wrap=True)
        table.add_column("Type")
        table.add_column("X", justify="right", style="sw.number")
        table.add_column("Y", justify="right", style="sw.number")
        table.add_column("Visible", justify="center")
        for item in items:
            node_type = str(item.get("type", ""))
            table.add_row(
                str(item["id"]),
                Text(node_type, style=style_for_type(node_type)),
                f"{item['x']:.2f}",
                f"{item['y']:.2f}",
                "yes" if item.get("visible") else "",
            )
        console.print()
        console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_snapshot(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "output", d.get("output", ""))
    _field(console, "size", f"{d.get('width')}x{d.get('height')}")
    _field(console, "visible", d.get("visible", 0))
    if verbose:
        _field(console, "ticks", d.get("ticks", 0))
        _field(console, "scale", d.get("scale", 1.0))
        _render_meta(console, result)


def _render_view(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    selected = result.data.get("selected")
    if selected:
        _field(console, "selected", selected)
    if verbose:
        _field(console, "selections", len(result.data.get("selections", [])))
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Renderer] = {
    "build": _render_build,
    "visible": _render_visible,
    "layout": _render_layout,
    "render": _render_snapshot,
    "view": _render_view,
}
