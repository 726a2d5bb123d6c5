"""Toolchain doctor.

Reports whether the executables the build shells out to are available.
Used standalone (``mrbwasm doctor``) and as the pre-flight gate of a build.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mrbwasm.output.console import Style
from mrbwasm.platform.detection import Platform, detect_linux_distro
from mrbwasm.services.base import BaseService
from mrbwasm.services.checkers.base import CheckResult
from mrbwasm.services.checkers.toolchain import ToolchainChecker

if TYPE_CHECKING:
    from mrbwasm.core.config import Config
    from mrbwasm.output.console import ConsoleProtocol

__all__ = ["DoctorReport", "DoctorService"]


@dataclass(frozen=True, slots=True)
class DoctorReport:
    results: list[CheckResult]

    @property
    def has_errors(self) -> bool:
        return any(r.is_error for r in self.results)

    @property
    def missing(self) -> list[str]:
        return [r.name for r in self.results if r.is_error]

    @property
    def missing_categories(self) -> list[str]:
        """Categories with at least one missing tool, in check order."""
        seen: list[str] = []
        for r in self.results:
            if r.is_error and r.category and r.category not in seen:
                seen.append(r.category)
        return seen


class DoctorService(BaseService):
    def __init__(
        self,
        *,
        config: Config,
        console: ConsoleProtocol,
        platform: Platform | None = None,
        checker: ToolchainChecker | None = None,
    ) -> None:
        super().__init__(config=config, console=console, platform=platform)
        if checker is None:
            distro = detect_linux_distro() if self._platform == Platform.LINUX else None
            checker = ToolchainChecker(platform=self._platform, distro=distro)
        self._checker = checker

    def check(self, *, gate: bool = False) -> DoctorReport:
        """Probe every required tool and print a report.

        In gate mode the final all-clear line is suppressed because the
        caller continues straight into the build.
        """
        report = DoctorReport(results=self._checker.check_all())

        for r in report.results:
            if r.is_error:
                self._console.error(f"{r.name}: {r.message}")
            else:
                self._console.print(f"{r.name}: {r.message}", Style.SUCCESS)

        if report.has_errors:
            # One hint per category, however many of its tools are missing
            for category in report.missing_categories:
                hint = next(
                    (r.hint for r in report.results if r.category == category and r.hint),
                    None,
                )
                if hint:
                    self._console.print(f"hint: {hint}", Style.DIM)
        elif not gate:
            self._console.success("doctor: ok, toolchain ready")

        return report
