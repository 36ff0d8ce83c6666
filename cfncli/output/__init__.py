"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    LogLevel,
    MockConsole,
    RichConsole,
    Style,
)

__all__ = [
    "ConsoleProtocol",
    "LogLevel",
    "MockConsole",
    "RichConsole",
    "Style",
]
