# SPDX-License-Identifier: MIT
"""Toolchain checker.

Validates that the external executables used by the build resolve on PATH:
- mruby: mrbc (bytecode compiler)
- Emscripten: emcc, emar (native-to-web compiler)
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from typing import Callable

from mrbwasm.platform.detection import LinuxDistro, Platform
from mrbwasm.services.checkers.base import CheckResult
from mrbwasm.services.checkers.common import BYTECODE, WEB, Hints, get_platform_key

__all__ = ["REQUIRED_TOOLS", "ToolchainChecker"]


# Declarative tool definitions: (executable, category)
REQUIRED_TOOLS: tuple[tuple[str, str], ...] = (
    ("mrbc", BYTECODE),
    ("emcc", WEB),
    ("emar", WEB),
)


@dataclass(frozen=True, slots=True)
class ToolchainChecker:
    """Check that every required tool resolves.

    Attributes:
        platform: Current platform (selects hint variants)
        distro: Linux distribution (if on Linux)
        hints: Installation hints by category
        which: Path resolver; a tool is found iff it returns a non-empty path
    """

    platform: Platform
    distro: LinuxDistro | None = None
    hints: Hints = field(default_factory=Hints.default)
    which: Callable[[str], str | None] = shutil.which

    def check_all(self) -> list[CheckResult]:
        return [self.check_tool(name, category) for name, category in REQUIRED_TOOLS]

    def check_tool(self, name: str, category: str) -> CheckResult:
        path = self.which(name)
        if path:
            return CheckResult.success(name, f"ok ({path})", category=category)
        return CheckResult.error(name, "missing", hint=self.hint_for(category), category=category)

    def hint_for(self, category: str) -> str | None:
        return self.hints.get(category, get_platform_key(self.platform, self.distro))
