"""Rendering and exit codes for build errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mrbwasm.core.errors import ErrorCode
from mrbwasm.output.console import Style

if TYPE_CHECKING:
    from mrbwasm.output.console import ConsoleProtocol
    from mrbwasm.services.build import BuildError

# Lines of captured tool output shown on failure
_OUTPUT_TAIL = 20


def build_error_exit_code(error: BuildError) -> int:
    match error.kind:
        case "no_input" | "input_missing":
            return int(ErrorCode.USER_ERROR)
        case "toolchain_missing" | "assets_missing":
            return int(ErrorCode.ENV_ERROR)
        case "io_error":
            return int(ErrorCode.IO_ERROR)
        case _:
            return int(ErrorCode.BUILD_ERROR)


def print_build_error(error: BuildError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.run is not None:
        output = (error.run.stderr or error.run.stdout).strip()
        if output:
            for line in output.splitlines()[-_OUTPUT_TAIL:]:
                console.print(f"  {line}", Style.DIM)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
