"""Console output.

Services never print directly; they receive a ``ConsoleProtocol``.
``RichConsole`` is used by the CLI, ``MockConsole`` by tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from rich.console import Console
from rich.markup import escape

__all__ = ["ConsoleProtocol", "MockConsole", "RichConsole", "Style"]


class Style(Enum):
    DEFAULT = ""
    DIM = "dim"
    INFO = "cyan"
    SUCCESS = "green"
    WARNING = "yellow"
    ERROR = "red"
    HEADER = "bold"


class ConsoleProtocol(Protocol):
    def print(self, msg: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, msg: str) -> None: ...

    def warning(self, msg: str) -> None: ...

    def error(self, msg: str) -> None: ...

    def header(self, title: str) -> None: ...

    def newline(self) -> None: ...


class RichConsole:
    """Console backed by rich; errors go to stderr."""

    def __init__(self, *, no_color: bool = False) -> None:
        # soft_wrap keeps long command lines intact when piped
        self._out = Console(no_color=no_color, highlight=False, soft_wrap=True)
        self._err = Console(stderr=True, no_color=no_color, highlight=False, soft_wrap=True)

    def print(self, msg: str, style: Style = Style.DEFAULT) -> None:
        self._out.print(escape(msg), style=style.value or None)

    def success(self, msg: str) -> None:
        self._out.print(escape(msg), style=Style.SUCCESS.value)

    def warning(self, msg: str) -> None:
        self._err.print(f"warning: {escape(msg)}", style=Style.WARNING.value)

    def error(self, msg: str) -> None:
        self._err.print(f"error: {escape(msg)}", style=Style.ERROR.value)

    def header(self, title: str) -> None:
        self._out.print(f"\n{escape(title)}", style=Style.HEADER.value)

    def newline(self) -> None:
        self._out.print()


@dataclass
class MockConsole:
    """Records output as ``(style, message)`` pairs."""

    messages: list[tuple[Style, str]] = field(default_factory=list)

    def print(self, msg: str, style: Style = Style.DEFAULT) -> None:
        self.messages.append((style, msg))

    def success(self, msg: str) -> None:
        self.messages.append((Style.SUCCESS, msg))

    def warning(self, msg: str) -> None:
        self.messages.append((Style.WARNING, msg))

    def error(self, msg: str) -> None:
        self.messages.append((Style.ERROR, msg))

    def header(self, title: str) -> None:
        self.messages.append((Style.HEADER, title))

    def newline(self) -> None:
        self.messages.append((Style.DEFAULT, ""))

    def lines(self, style: Style) -> list[str]:
        return [msg for s, msg in self.messages if s == style]
