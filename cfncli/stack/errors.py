from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ConfigurationError:
    """Options that conflict with each other or have invalid values."""

    message: str
    options: tuple[str, ...] = ()
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ContentResolutionError:
    """An ``@path`` option value that could not be read."""

    option: str
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"cannot read {self.option} from {self.path}: {self.reason}"

    @property
    def hint(self) -> str | None:
        return None


OptionError = ConfigurationError | ContentResolutionError
