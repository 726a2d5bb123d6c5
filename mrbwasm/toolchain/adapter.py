"""External toolchain invocations.

One method per tool. Each call runs synchronously, captures output and
returns a ``ToolRun``; callers decide what a failure means.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from mrbwasm.services.checkers.common import CommandRunner, DefaultCommandRunner

if TYPE_CHECKING:
    from mrbwasm.core.config import Config

__all__ = [
    "MRBC",
    "EMCC",
    "MINIFY_FLAGS",
    "SIZE_OPT_FLAG",
    "SubprocessToolchain",
    "ToolRun",
    "Toolchain",
    "emcc_args",
    "mrbc_args",
]


MRBC = "mrbc"
EMCC = "emcc"

# Exit status reported when the executable could not be started at all
_NOT_EXECUTABLE = 127

# emcc switches toggled together by --optimize
SIZE_OPT_FLAG = "-Os"
MINIFY_FLAGS = ("--closure", "1")


@dataclass(frozen=True, slots=True)
class ToolRun:
    tool: str
    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class Toolchain(Protocol):
    def compile_bytecode(self, config: Config, source: Path) -> ToolRun: ...

    def compile_web(self, config: Config) -> ToolRun: ...


def mrbc_args(config: Config, source: Path) -> list[str]:
    """``mrbc -B<app> -o build/app.c <source>``"""
    return [MRBC, f"-B{config.app_name}", "-o", str(config.intermediate_path), str(source)]


def emcc_args(config: Config) -> list[str]:
    """emcc command line; both optimization switches appear iff ``config.optimize``."""
    args = [EMCC, "-s", "WASM=1"]
    if config.optimize:
        args.append(SIZE_OPT_FLAG)
    args += [
        "-I",
        str(config.include_dir),
        str(config.intermediate_path),
        str(config.static_lib),
        "-o",
        str(config.loader_path),
    ]
    if config.optimize:
        args += MINIFY_FLAGS
    return args


class SubprocessToolchain:
    """Run the real tools through a ``CommandRunner``."""

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or DefaultCommandRunner()

    def compile_bytecode(self, config: Config, source: Path) -> ToolRun:
        return self._run(MRBC, mrbc_args(config, source))

    def compile_web(self, config: Config) -> ToolRun:
        return self._run(EMCC, emcc_args(config))

    def _run(self, tool: str, argv: list[str]) -> ToolRun:
        start = time.monotonic()
        try:
            proc = self._runner.run(argv, capture=True)
        except OSError as e:
            return ToolRun(
                tool=tool,
                argv=argv,
                returncode=_NOT_EXECUTABLE,
                stderr=str(e),
                duration=time.monotonic() - start,
            )
        return ToolRun(
            tool=tool,
            argv=argv,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            duration=time.monotonic() - start,
        )
