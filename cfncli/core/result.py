"""Result type for expected failures.

Operations that can fail for reasons the caller must handle (bad options,
unreadable files, API rejections) return ``Ok`` or ``Err`` instead of raising.
Exceptions are reserved for programming errors.

Usage:
    def parse_interval(raw: str) -> Result[int, str]:
        if not raw.isdigit():
            return Err(f"not a number: {raw}")
        return Ok(int(raw))

    match parse_interval("10"):
        case Ok(value):
            print(f"polling every {value}s")
        case Err(error):
            print(f"error: {error}")
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
