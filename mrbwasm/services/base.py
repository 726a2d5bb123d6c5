"""Base service class with common initialization."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mrbwasm.platform.detection import detect_platform

if TYPE_CHECKING:
    from mrbwasm.core.config import Config
    from mrbwasm.output.console import ConsoleProtocol
    from mrbwasm.platform.detection import Platform


class BaseService:
    """Base class for services that need config, console and platform.

    Provides:
    - Common keyword-only constructor
    - Platform detection when none is injected
    """

    def __init__(
        self,
        *,
        config: Config,
        console: ConsoleProtocol,
        platform: Platform | None = None,
    ) -> None:
        self._config = config
        self._console = console
        self._platform = platform or detect_platform()
