"""Command: recompute positions of the stored barrow."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from barrowctl.commands._base import BarrowCommand

if TYPE_CHECKING:
    from barrowctl.commands._context import AppContext


@click.command(
    cls=BarrowCommand,
    examples="""\
  barrowctl layout
  barrowctl --json layout
  BARROWCTL_LAYOUT__MARGIN=4 barrowctl layout""",
)
@click.pass_obj
def layout(app: AppContext) -> None:
    """Resolve every placement into a position and save the barrow."""
    app.emit(app.service.layout())
