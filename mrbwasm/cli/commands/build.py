from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import typer

from mrbwasm.cli.context import build_context
from mrbwasm.core.result import Err, Ok
from mrbwasm.output.console import Style
from mrbwasm.output.errors import build_error_exit_code, print_build_error
from mrbwasm.services.build import BuildRequest, BuildService

if TYPE_CHECKING:
    from mrbwasm.output.console import ConsoleProtocol
    from mrbwasm.services.build import BuildArtifacts


def build(
    file: Optional[str] = typer.Argument(None, help="Ruby script to compile"),
    optimize: Optional[bool] = typer.Option(
        None,
        "--optimize/--no-optimize",
        help="Optimize for size and minify output (default from mrbwasm.toml).",
        show_default=False,
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print tool commands without running them."),
) -> None:
    """Compile a Ruby script to a WebAssembly module in ./build."""
    ctx = build_context()
    config = ctx.config
    if optimize is not None:
        config = dataclasses.replace(config, optimize=optimize)

    service = BuildService(config=config, console=ctx.console, platform=ctx.platform)
    request = BuildRequest(source=Path(file) if file else None, dry_run=dry_run)

    match service.build(request):
        case Ok(artifacts):
            if not dry_run:
                _print_summary(artifacts, ctx.console)
        case Err(error):
            print_build_error(error, ctx.console)
            raise typer.Exit(code=build_error_exit_code(error))


def _print_summary(artifacts: BuildArtifacts, console: ConsoleProtocol) -> None:
    console.success("Build complete")
    console.print(f"{artifacts.output_dir.name}/", Style.HEADER)
    console.print(f"├── {artifacts.module.name}")
    console.print(f"├── {artifacts.loader.name}")
    console.print(f"└── {artifacts.page.name}")
