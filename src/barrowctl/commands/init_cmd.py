"""Command: barrow initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from barrowctl.commands._base import BarrowCommand

if TYPE_CHECKING:
    from barrowctl.commands._context import AppContext

_INIT_EXAMPLES = """\
  barrowctl init
  barrowctl init "Deepdelve"
  barrowctl -f maps/crypt.json init Crypt
  barrowctl init --force "Fresh Start\""""


@click.command("init", cls=BarrowCommand, examples=_INIT_EXAMPLES)
@click.argument("name", required=False, default=None)
@click.option("--force", is_flag=True, help="Replace an existing barrow file.")
@click.pass_obj
def init_cmd(app: AppContext, name: str | None, force: bool) -> None:
    """Create a new, empty barrow file."""
    app.emit(app.service.init(name, force=force))
