"""Console output abstraction.

Services report progress through ``ConsoleProtocol`` rather than printing
directly, so they can run under Rich in the terminal and under
``MockConsole`` in tests. Verbosity is a ``LogLevel`` passed to the console
at construction; nothing reads it from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Protocol

__all__ = [
    "LogLevel",
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class LogLevel(IntEnum):
    """Verbosity threshold, numbered as the ``--log-level`` option."""

    DEBUG = 0
    INFO = 1
    ERROR = 2
    CRITICAL = 3


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()


class ConsoleProtocol(Protocol):
    """Styled, level-aware console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling.

        Args:
            message: The text to print
            style: The style to apply
        """
        ...

    def debug(self, message: str) -> None:
        """Print a diagnostic message, shown only at DEBUG level."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...


class RichConsole:
    """Console implementation backed by Rich.

    Messages below ``level`` are dropped: ``debug`` needs DEBUG, regular
    output needs INFO, errors need ERROR. CRITICAL silences everything, and
    the exit code is then the only signal.
    """

    def __init__(self, level: LogLevel = LogLevel.INFO) -> None:
        from rich.console import Console

        self.level = level
        self._console = Console(highlight=False, soft_wrap=True)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
        }

    def _enabled(self, needed: LogLevel) -> bool:
        return self.level <= needed

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        if not self._enabled(LogLevel.INFO):
            return
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def debug(self, message: str) -> None:
        if self._enabled(LogLevel.DEBUG):
            self._console.print(message, style="dim", markup=False)

    def success(self, message: str) -> None:
        if self._enabled(LogLevel.INFO):
            self._console.print(f"[green]OK[/green] {_escape(message)}")

    def error(self, message: str) -> None:
        if self._enabled(LogLevel.ERROR):
            self._console.print(f"[red bold]error:[/red bold] {_escape(message)}")

    def warning(self, message: str) -> None:
        if self._enabled(LogLevel.INFO):
            self._console.print(f"[yellow]warning:[/yellow] {_escape(message)}")

    def info(self, message: str) -> None:
        if self._enabled(LogLevel.INFO):
            self._console.print(f"[cyan]info:[/cyan] {_escape(message)}")


def _escape(message: str) -> str:
    # Stack status reasons routinely contain [brackets].
    from rich.markup import escape

    return escape(message)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that captures output for tests, regardless of level."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def debug(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.DIM))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_success(self) -> bool:
        return any(o.style == Style.SUCCESS for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
