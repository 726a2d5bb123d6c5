from __future__ import annotations

import typer

from mrbwasm import __version__
from mrbwasm.cli.commands.build import build
from mrbwasm.cli.commands.doctor import doctor
from mrbwasm.cli.commands.serve import serve


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Compile Ruby scripts to WebAssembly with mruby and Emscripten.",
)


# Commands
app.command()(build)
app.command()(serve)
app.command()(doctor)


def _version_callback(value: bool) -> None:
    # Eager, so it runs before the group complains about a missing command.
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    pass


def main() -> None:
    app()
