# SPDX-License-Identifier: MIT
"""Helpers shared by checkers and services.

- ``CommandRunner``: injectable subprocess boundary
- ``Hints``: platform-specific install hints per toolchain category
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Protocol

from mrbwasm.platform.detection import LinuxDistro, Platform

__all__ = [
    "BYTECODE",
    "WEB",
    "CommandRunner",
    "DefaultCommandRunner",
    "Hints",
    "InstallHint",
    "get_platform_key",
]


# Toolchain categories
BYTECODE = "bytecode"
WEB = "web"


class CommandRunner(Protocol):
    def run(
        self, args: list[str], *, capture: bool = True
    ) -> subprocess.CompletedProcess[str]: ...


class DefaultCommandRunner:
    """Run commands with ``subprocess.run`` (never raises on non-zero exit)."""

    def run(
        self, args: list[str], *, capture: bool = True
    ) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            args,
            capture_output=capture,
            text=True,
            check=False,
        )


@dataclass(frozen=True, slots=True)
class InstallHint:
    """Platform-specific installation hint."""

    fedora: str
    debian: str
    arch: str
    macos: str
    windows: str

    def for_key(self, key: str) -> str:
        match key:
            case "fedora":
                return self.fedora
            case "debian":
                return self.debian
            case "arch":
                return self.arch
            case "macos":
                return self.macos
            case "windows":
                return self.windows
            case _:
                return f"{self.debian}  # (adjust for your distro)"


_DEFAULT_HINTS: dict[str, InstallHint] = {
    BYTECODE: InstallHint(
        fedora="mruby: sudo dnf install mruby",
        debian="mruby: sudo apt install mruby libmruby-dev",
        arch="mruby: sudo pacman -S mruby",
        macos="mruby: brew install mruby",
        windows="mruby: build from https://github.com/mruby/mruby and add its bin/ to PATH",
    ),
    WEB: InstallHint(
        fedora="emscripten: sudo dnf install emscripten, or source emsdk_env.sh from an emsdk checkout",
        debian="emscripten: sudo apt install emscripten, or source emsdk_env.sh from an emsdk checkout",
        arch="emscripten: sudo pacman -S emscripten",
        macos="emscripten: brew install emscripten",
        windows="emscripten: install emsdk (https://emscripten.org) and run emsdk_env.bat",
    ),
}


@dataclass(frozen=True, slots=True)
class Hints:
    """Install hints by toolchain category."""

    by_category: dict[str, InstallHint]

    @classmethod
    def default(cls) -> Hints:
        return cls(by_category=dict(_DEFAULT_HINTS))

    def get(self, category: str, platform_key: str) -> str | None:
        hint = self.by_category.get(category)
        if hint is None:
            return None
        return hint.for_key(platform_key)


def get_platform_key(platform: Platform, distro: LinuxDistro | None = None) -> str:
    """Key used to select a hint variant ("debian", "macos", ...)."""
    match platform:
        case Platform.LINUX:
            return distro.value if distro is not None else LinuxDistro.UNKNOWN.value
        case Platform.MACOS:
            return "macos"
        case Platform.WINDOWS:
            return "windows"
        case _:
            return "unknown"
