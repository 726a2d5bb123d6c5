from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from mrbwasm.core.config import Config, ConfigError, load_config
from mrbwasm.core.errors import ErrorCode
from mrbwasm.output.console import ConsoleProtocol, RichConsole
from mrbwasm.platform.detection import Platform, detect_platform


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    platform: Platform


def build_context(cwd: Path | None = None) -> CLIContext:
    """Load configuration once for this invocation; exit on a bad project file."""
    console = RichConsole()
    try:
        config = load_config(cwd)
    except ConfigError as e:
        console.error(str(e))
        raise typer.Exit(code=int(ErrorCode.USER_ERROR)) from e
    return CLIContext(config=config, console=console, platform=detect_platform())
