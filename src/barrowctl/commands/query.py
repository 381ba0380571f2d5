"""Commands show and list read the stored barrow."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from barrowctl.commands._base import BarrowCommand, BarrowGroup

if TYPE_CHECKING:
    from barrowctl.commands._context import AppContext

_LIST_EXAMPLES = """\
  barrowctl list caverns
  barrowctl list carddons
  barrowctl -q list caverns
  barrowctl --json list carddons"""


@click.command(
    cls=BarrowCommand,
    examples="""\
  barrowctl show
  barrowctl --json show
  barrowctl -f maps/crypt.json show""",
)
@click.pass_obj
def show(app: AppContext) -> None:
    """Print the barrow: metadata, caverns, links, and carddons."""
    app.emit(app.service.show())


@click.group("list", cls=BarrowGroup, examples=_LIST_EXAMPLES)
@click.pass_obj
def list_group(app: AppContext) -> None:
    """List caverns or carddons."""


@list_group.command(examples="  barrowctl list caverns")
@click.pass_obj
def caverns(app: AppContext) -> None:
    """List caverns with role and size class."""
    app.emit(app.service.list_caverns())


@list_group.command(examples="  barrowctl list carddons")
@click.pass_obj
def carddons(app: AppContext) -> None:
    """List carddons with their owning cavern."""
    app.emit(app.service.list_carddons())
