"""Serve command - host the build output over HTTP."""

from __future__ import annotations

import typer

from mrbwasm.cli.context import build_context
from mrbwasm.services.serve import ServeService


def serve(
    open_: bool = typer.Option(False, "--open", "-o", help="Open the page in a browser."),
) -> None:
    """Serve ./build on http://localhost:8000."""
    ctx = build_context()
    service = ServeService(config=ctx.config, console=ctx.console, platform=ctx.platform)
    raise typer.Exit(code=service.serve(open_browser=open_))
