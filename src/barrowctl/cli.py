"""Root CLI group for barrowctl with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from barrowctl import __version__
from barrowctl.commands import register_commands
from barrowctl.commands._context import AppContext
from barrowctl.config.settings import BarrowSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="barrowctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-f",
    "--file",
    "barrow_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Barrow snapshot file (default: [barrow] file in the workspace).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    barrow_file: Path | None,
) -> None:
    """barrowctl — describe barrows in Shadax or JSON and lay them out."""
    ctx.ensure_object(dict)
    flags: dict[str, object] = {
        "json_output": json_output,
        "quiet": quiet,
        "verbose": verbose,
        "log_json": log_json,
    }
    if barrow_file is not None:
        flags["barrow_file"] = barrow_file
    settings = BarrowSettings.from_cli(config_path=config_path, **flags)
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
