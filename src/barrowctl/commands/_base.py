"""Click base classes carrying an on-demand ``--examples`` flag.

``--help`` stays short; ``barrowctl <command> --examples`` prints the
longer usage recipes attached through the ``examples=`` keyword.
"""

from __future__ import annotations

from typing import Any

import click


class _ExamplesMixin:
    """Stores ``examples`` and, when present, adds the eager flag."""

    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if not examples:
            return

        def _print(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
            if value:
                click.echo(f"Examples for '{ctx.command_path}':\n")
                click.echo(examples)
                ctx.exit(0)

        self.params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                is_eager=True,
                expose_value=False,
                callback=_print,
                help="Show usage examples.",
            )
        )


class BarrowCommand(_ExamplesMixin, click.Command):
    """A click Command that accepts ``examples=``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class BarrowGroup(_ExamplesMixin, click.Group):
    """A click Group that accepts ``examples=``.

    Subcommands declared with ``@group.command`` default to BarrowCommand.
    """

    command_class = BarrowCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
