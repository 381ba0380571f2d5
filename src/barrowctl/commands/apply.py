"""Commands apply, parse and say feed descriptions into the barrow."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import click

from barrowctl.commands._base import BarrowCommand
from barrowctl.domain.payload import PayloadFormat

if TYPE_CHECKING:
    from barrowctl.commands._context import AppContext

_FORMAT_OPTION = click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in PayloadFormat], case_sensitive=False),
    default=PayloadFormat.AUTO.value,
    show_default=True,
    help="Input format; auto detects JSON versus Shadax.",
)

_SOURCE_ARGUMENT = click.argument(
    "source", type=click.File("r", encoding="utf-8"), default="-", required=False
)


@click.command(
    cls=BarrowCommand,
    examples="""\
  barrowctl apply plan.shadax
  barrowctl apply instructions.json --format instructions
  echo 'CAVERN forge SIZE small AT E OF hall' | barrowctl apply
  barrowctl apply commands.json --no-layout""",
)
@_SOURCE_ARGUMENT
@_FORMAT_OPTION
@click.option("--no-layout", is_flag=True, help="Skip position recomputation.")
@click.pass_obj
def apply(app: AppContext, source: TextIO, fmt: str, no_layout: bool) -> None:
    """Merge a description from SOURCE (file or '-' for stdin) into the barrow."""
    text = source.read()
    app.emit(app.service.apply(text, fmt, layout=False if no_layout else None))


@click.command(
    cls=BarrowCommand,
    examples="""\
  barrowctl parse plan.shadax
  barrowctl --json parse instructions.json
  echo 'LINK hall armory DIR E TYPE door' | barrowctl -q parse""",
)
@_SOURCE_ARGUMENT
@_FORMAT_OPTION
@click.pass_obj
def parse(app: AppContext, source: TextIO, fmt: str) -> None:
    """Show the commands SOURCE decodes to, without changing the barrow."""
    app.emit(app.service.parse(source.read(), fmt))


@click.command(
    cls=BarrowCommand,
    examples="""\
  barrowctl say "add cavern Forge"
  barrowctl say "add cavern Armory size large east of Hall"
  barrowctl say "add link Hall to Armory (east)"
  barrowctl say "add carddon Anvil to cavern Forge"
  barrowctl say "list caverns\"""",
)
@click.argument("phrase", nargs=-1, required=True)
@click.option("--no-layout", is_flag=True, help="Skip position recomputation.")
@click.pass_obj
def say(app: AppContext, phrase: tuple[str, ...], no_layout: bool) -> None:
    """Apply one editor phrase, e.g. 'rename cavern Hall to Great Hall'."""
    text = " ".join(phrase)
    app.emit(app.service.say(text, layout=False if no_layout else None))
