from __future__ import annotations

import typer

from mrbwasm.cli.context import build_context
from mrbwasm.core.errors import ErrorCode
from mrbwasm.services.doctor import DoctorService


def doctor() -> None:
    """Check that mruby and Emscripten tools are installed."""
    ctx = build_context()
    report = DoctorService(config=ctx.config, console=ctx.console, platform=ctx.platform).check()
    if report.has_errors:
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
