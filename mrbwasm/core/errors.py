"""Process exit codes."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1  # bad arguments, missing input, nothing built yet
    ENV_ERROR = 2  # missing toolchain or bundled assets
    BUILD_ERROR = 3  # external tool failed or produced no output
    IO_ERROR = 4  # output directory not writable, port in use
