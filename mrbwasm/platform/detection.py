"""
Platform detection utilities.

Simple, stateless functions for cross-platform compatibility.
"""

from __future__ import annotations

import platform as _platform
from enum import Enum
from pathlib import Path

__all__ = ["LinuxDistro", "Platform", "detect_linux_distro", "detect_platform"]


class Platform(Enum):
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


class LinuxDistro(Enum):
    FEDORA = "fedora"
    DEBIAN = "debian"
    ARCH = "arch"
    UNKNOWN = "unknown"


def detect_platform(system: str | None = None) -> Platform:
    """
    Detect current operating system.

    ``system`` defaults to ``platform.system()``.
    """
    name = (system if system is not None else _platform.system()).lower()
    if name.startswith("linux"):
        return Platform.LINUX
    if name.startswith("darwin"):
        return Platform.MACOS
    if name.startswith(("windows", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


def detect_linux_distro(os_release: Path = Path("/etc/os-release")) -> LinuxDistro:
    """Detect Linux distribution family from os-release."""
    try:
        content = os_release.read_text(encoding="utf-8").lower()
    except OSError:
        return LinuxDistro.UNKNOWN

    if "fedora" in content or "rhel" in content or "centos" in content:
        return LinuxDistro.FEDORA
    if "ubuntu" in content or "debian" in content or "mint" in content:
        return LinuxDistro.DEBIAN
    if "arch" in content or "manjaro" in content:
        return LinuxDistro.ARCH
    return LinuxDistro.UNKNOWN
