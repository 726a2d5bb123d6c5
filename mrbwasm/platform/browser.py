"""Cross-platform browser launch."""

from __future__ import annotations

import subprocess

from mrbwasm.platform.detection import Platform, detect_platform

__all__ = ["browser_command", "open_in_browser"]


def browser_command(url: str, platform: Platform) -> list[str]:
    """Return the launcher command for ``platform``.

    Linux uses xdg-open, Windows uses ``start`` through cmd.exe,
    everything else uses ``open``.
    """
    if platform == Platform.LINUX:
        return ["xdg-open", url]
    if platform == Platform.WINDOWS:
        # The empty string is the window title argument of `start`.
        return ["cmd", "/c", "start", "", url]
    return ["open", url]


def open_in_browser(url: str, platform: Platform | None = None) -> bool:
    """Open ``url`` with the platform launcher.

    Returns True on success, False if the launcher is unavailable or fails.
    """
    cmd = browser_command(url, platform or detect_platform())
    try:
        result = subprocess.run(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError:
        return False
    return result.returncode == 0
