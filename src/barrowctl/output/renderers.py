"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from barrowctl.output.console import create_console, get_output, style_for_role, style_for_size

if TYPE_CHECKING:
    from rich.console import Console

    from barrowctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    # For list results, return IDs only
    items = result.data.get("items")
    if items and isinstance(items, list):
        ids = (item["id"] for item in items if isinstance(item, dict) and "id" in item)
        return "\n".join(str(i) for i in ids)
    if result.op == "parse":
        return "\n".join(_json.dumps(c, separators=(",", ":")) for c in result.data["commands"])

    barrow_id = result.data.get("id")
    return str(barrow_id) if barrow_id is not None else f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="barrow.ok")
    op = Text(f"  {result.op}", style="barrow.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="barrow.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="barrow.id")
    elif key == "path":
        v = Text(str(value), style="barrow.path")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _fields(console: Console, data: dict[str, Any], keys: tuple[str, ...]) -> None:
    for key in keys:
        if key in data:
            _field(console, key, data[key])


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += f"  ({', '.join(f'{k}={v}' for k, v in annotations.items())})"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _coord(value: Any) -> str:
    return f"{float(value):.2f}" if isinstance(value, (int, float)) else ""


def _cavern_table(caverns: list[dict[str, Any]], *, positions: bool = False) -> Table:
    """Build a Rich Table for cavern rows (snapshot or listing shape)."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="barrow.id", no_wrap=True)
    table.add_column("Name", style="barrow.name")
    table.add_column("Role")
    table.add_column("Size")
    if positions:
        table.add_column("Placement")
        table.add_column("Position", style="barrow.coord")

    for c in caverns:
        role = str(c.get("role", ""))
        size = str(c.get("sizeClass", ""))
        row: list[Any] = [
            str(c.get("id", "")),
            str(c.get("name", "")),
            Text(role, style=style_for_role(role)),
            Text(size, style=style_for_size(size)),
        ]
        if positions:
            placement = c.get("placement")
            row.append(
                f"{placement['direction']} of {placement['anchorId']}" if placement else ""
            )
            pos = c.get("position")
            row.append(
                f"({_coord(pos['x'])}, {_coord(pos['y'])}, {_coord(pos['z'])})" if pos else ""
            )
        table.add_row(*row)
    return table


def _carddon_table(carddons: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="barrow.id", no_wrap=True)
    table.add_column("Name", style="barrow.name")
    table.add_column("Cavern")
    for cd in carddons:
        table.add_row(
            str(cd.get("id", "")),
            str(cd.get("name", "")),
            str(cd.get("ownerCavernId") or ""),
        )
    return table


def _link_table(links: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("From", style="barrow.id")
    table.add_column("To", style="barrow.id")
    table.add_column("Type")
    table.add_column("Direction")
    for link in links:
        table.add_row(
            str(link.get("fromId", "")),
            str(link.get("toId", "")),
            str(link.get("linkType", "")),
            str(link.get("direction") or ""),
        )
    return table


def _render_barrow(console: Console, snapshot: dict[str, Any]) -> None:
    """Print a snapshot as a titled panel followed by its tables."""
    meta = snapshot.get("meta", {})
    lines = [f"{k}: {v}" for k, v in meta.items()]
    lines.append(
        f"{len(snapshot.get('caverns', []))} caverns, "
        f"{len(snapshot.get('links', []))} links, "
        f"{len(snapshot.get('carddons', []))} carddons"
    )
    console.print(Panel("\n".join(lines), title=str(snapshot.get("id", "?")), expand=False))
    if snapshot.get("caverns"):
        console.print(_cavern_table(snapshot["caverns"], positions=True))
    if snapshot.get("links"):
        console.print(_link_table(snapshot["links"]))
    if snapshot.get("carddons"):
        console.print(_carddon_table(snapshot["carddons"]))


def _render_responses(console: Console, responses: list[dict[str, Any]]) -> None:
    for response in responses:
        kind = response.get("type")
        console.print()
        if kind == "listCaverns":
            console.print(_cavern_table(response.get("caverns", [])))
        elif kind == "listCarddons":
            console.print(_carddon_table(response.get("carddons", [])))
        elif kind == "showBarrow":
            _render_barrow(console, response.get("barrow", {}))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="barrow.error")
    op = Text(f"  {result.op}", style="barrow.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Mutation renderers ────────────────────────────────────────────────


def _render_init(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(console, result.data, ("id", "path"))
    if verbose:
        _render_meta(console, result)


_APPLY_FIELDS = ("id", "path", "format", "applied", "caverns", "links", "carddons")


def _render_apply(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render apply/say results: summary, executor messages, query responses."""
    _status_line(console, result)
    _fields(console, result.data, _APPLY_FIELDS)
    messages = result.data.get("messages", [])
    if messages:
        console.print()
        for message in messages:
            console.print(Text(f"  {message}"))
    _render_responses(console, result.data.get("responses", []))
    if verbose:
        _render_meta(console, result)


def _render_layout(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(console, result.data, ("id", "path"))

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Kind")
    table.add_column("ID", style="barrow.id", no_wrap=True)
    table.add_column("X", style="barrow.coord", justify="right")
    table.add_column("Y", style="barrow.coord", justify="right")
    table.add_column("Z", style="barrow.coord", justify="right")
    ring = set(result.data.get("ring", []))
    for kind in ("caverns", "carddons"):
        for row in result.data.get(kind, []):
            label = kind[:-1] + (" (ring)" if row["id"] in ring else "")
            table.add_row(label, row["id"], _coord(row["x"]), _coord(row["y"]), _coord(row["z"]))
    console.print(table)
    if verbose:
        _render_meta(console, result)


# ── Query renderers ───────────────────────────────────────────────────


def _render_parse(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(console, result.data, ("format", "count"))
    console.print()
    for cmd in result.data.get("commands", []):
        console.print(Text(f"  {_json.dumps(cmd, separators=(',', ':'))}"))


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _render_barrow(console, result.data.get("barrow", {}))
    if verbose:
        _render_meta(console, result)


def _render_cavern_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    console.print(_cavern_table(items))
    console.print(f"\n{result.data.get('count', len(items))} caverns")


def _render_carddon_list(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    console.print(_carddon_table(items))
    console.print(f"\n{result.data.get('count', len(items))} carddons")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Mutations
    "init": _render_init,
    "apply": _render_apply,
    "say": _render_apply,
    "layout": _render_layout,
    # Queries
    "parse": _render_parse,
    "show": _render_show,
    "list_caverns": _render_cavern_list,
    "list_carddons": _render_carddon_list,
}
