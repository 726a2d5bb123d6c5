"""Serve the build output over HTTP.

The listening socket is bound before the browser is launched: the launcher
thread waits on a readiness event that is set right after the bind.
"""

from __future__ import annotations

import threading
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from typing import TYPE_CHECKING, Callable, Protocol

from mrbwasm.core.errors import ErrorCode
from mrbwasm.output.console import Style
from mrbwasm.platform.browser import open_in_browser
from mrbwasm.services.base import BaseService

if TYPE_CHECKING:
    from mrbwasm.core.config import Config
    from mrbwasm.output.console import ConsoleProtocol
    from mrbwasm.platform.detection import Platform

__all__ = ["ArtifactRequestHandler", "BrowserLauncher", "ServeService"]


# Upper bound on how long the launcher waits for the server to bind
READY_TIMEOUT = 10.0


class ArtifactRequestHandler(SimpleHTTPRequestHandler):
    extensions_map = {
        **SimpleHTTPRequestHandler.extensions_map,
        ".js": "application/javascript",
        ".wasm": "application/wasm",
    }

    def end_headers(self) -> None:
        # Rebuilt artifacts keep their names; never let the browser cache them.
        self.send_header("Cache-Control", "no-store, no-cache, must-revalidate, max-age=0")
        super().end_headers()


class HTTPServerLike(Protocol):
    def serve_forever(self) -> None: ...

    def server_close(self) -> None: ...


ServerFactory = Callable[[tuple[str, int], Callable[..., SimpleHTTPRequestHandler]], HTTPServerLike]


class BrowserLauncher:
    """Open a URL from a background thread once ``ready`` is set."""

    def __init__(
        self,
        url: str,
        *,
        opener: Callable[[str], bool] = open_in_browser,
        timeout: float = READY_TIMEOUT,
    ) -> None:
        self.url = url
        self.ready = threading.Event()
        self.opened = threading.Event()
        self._opener = opener
        self._timeout = timeout
        self._thread = threading.Thread(target=self._run, name="browser-launcher", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def _run(self) -> None:
        if not self.ready.wait(self._timeout):
            return
        if self._opener(self.url):
            self.opened.set()


class ServeService(BaseService):
    def __init__(
        self,
        *,
        config: Config,
        console: ConsoleProtocol,
        platform: Platform | None = None,
        server_factory: ServerFactory = ThreadingHTTPServer,
        opener: Callable[[str], bool] | None = None,
    ) -> None:
        super().__init__(config=config, console=console, platform=platform)
        self._server_factory = server_factory
        self._opener = opener or partial(open_in_browser, platform=self._platform)

    def serve(self, *, open_browser: bool = False) -> int:
        """Serve the output directory until interrupted. Returns an exit code."""
        cfg = self._config
        if not cfg.page_path.is_file():
            self._console.error(f"host page not found: {cfg.page_path}")
            self._console.print("hint: Run: mrbwasm build <file>", Style.DIM)
            return int(ErrorCode.USER_ERROR)

        launcher: BrowserLauncher | None = None
        if open_browser:
            launcher = BrowserLauncher(cfg.url, opener=self._opener)
            launcher.start()

        handler = partial(ArtifactRequestHandler, directory=str(cfg.output_dir))
        try:
            server = self._server_factory((cfg.host, cfg.port), handler)
        except OSError as e:
            self._console.error(f"cannot listen on {cfg.host}:{cfg.port} ({e})")
            return int(ErrorCode.IO_ERROR)

        if launcher is not None:
            launcher.ready.set()

        self._console.print(f"serve: {cfg.url}", Style.INFO)
        self._console.print("Press Ctrl+C to stop", Style.DIM)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            self._console.newline()
        finally:
            server.server_close()
        return int(ErrorCode.OK)
