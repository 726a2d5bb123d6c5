# SPDX-License-Identifier: MIT
"""Check result type shared by checkers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = ["CheckResult", "CheckStatus"]


class CheckStatus(Enum):
    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Outcome of a single check.

    Attributes:
        name: Display name (usually the executable name)
        status: ok or error
        message: Short status text ("ok (/usr/bin/emcc)", "missing")
        hint: Remediation text, if any
        category: Toolchain category the check belongs to
    """

    name: str
    status: CheckStatus
    message: str
    hint: str | None = None
    category: str | None = None

    @property
    def is_error(self) -> bool:
        return self.status == CheckStatus.ERROR

    @classmethod
    def success(cls, name: str, message: str, *, category: str | None = None) -> CheckResult:
        return cls(name, CheckStatus.OK, message, category=category)

    @classmethod
    def error(
        cls, name: str, message: str, hint: str | None = None, *, category: str | None = None
    ) -> CheckResult:
        return cls(name, CheckStatus.ERROR, message, hint, category)
