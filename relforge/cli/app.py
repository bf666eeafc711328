from __future__ import annotations

import typer

from relforge import __version__
from relforge.cli.commands.config_cmd import show_config
from relforge.cli.commands.preview_cmd import preview
from relforge.cli.commands.run_cmd import run


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Bump version files, fork a dated release branch and push tags.",
)


# Commands
app.command()(run)
app.command()(preview)
app.command("config")(show_config)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    del version


def main() -> None:
    app()
