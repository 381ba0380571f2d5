"""Subcommand modules for barrowctl.

Provides register_commands() which uses deferred imports to keep
``barrowctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group.

    1 group (``list``) + 6 standalone commands.
    """
    # --- Groups ---
    from barrowctl.commands.query import list_group

    cli.add_command(list_group)

    # --- Standalone commands ---
    from barrowctl.commands.apply import apply, parse, say
    from barrowctl.commands.init_cmd import init_cmd
    from barrowctl.commands.layout import layout
    from barrowctl.commands.query import show

    cli.add_command(init_cmd)
    cli.add_command(apply)
    cli.add_command(parse)
    cli.add_command(say)
    cli.add_command(layout)
    cli.add_command(show)
