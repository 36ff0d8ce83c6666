"""Typed configuration loading.

cfncli reads optional defaults from a ``cfncli.toml`` file:

    [apply]
    interval = 10        # seconds between event queries
    timeout = 1800       # seconds before giving up
    fail_on_noop = false
    log_level = 1        # 0=DEBUG, 1=INFO, 2=ERROR, 3=CRITICAL

    [aws]
    region = "eu-west-1"
    endpoint_url = "http://localhost:4566"

Command-line flags override anything set here.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_number, get_str, get_table

__all__ = [
    "AwsSettings",
    "ApplySettings",
    "ConfigError",
    "Settings",
    "CONFIG_FILENAME",
    "DEFAULT_INTERVAL_SECONDS",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_LOG_LEVEL",
    "load_settings",
    "resolve_settings",
]

CONFIG_FILENAME = "cfncli.toml"

DEFAULT_INTERVAL_SECONDS = 10.0
DEFAULT_TIMEOUT_SECONDS = 1800.0
DEFAULT_LOG_LEVEL = 1


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the config file cannot be loaded or parsed."""

    message: str
    path: Path | None = None

    @property
    def hint(self) -> str | None:
        if self.path is None:
            return None
        return f"check {self.path}"


@dataclass(frozen=True, slots=True)
class ApplySettings:
    """Defaults for the ``apply`` command."""

    interval: float = DEFAULT_INTERVAL_SECONDS
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    fail_on_noop: bool = False
    log_level: int = DEFAULT_LOG_LEVEL


@dataclass(frozen=True, slots=True)
class AwsSettings:
    """Client settings. Credentials are left to boto3's default chain."""

    region: str | None = None
    endpoint_url: str | None = None


@dataclass(frozen=True, slots=True)
class Settings:
    apply: ApplySettings = field(default_factory=ApplySettings)
    aws: AwsSettings = field(default_factory=AwsSettings)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Settings:
        """Create Settings from parsed TOML."""
        apply: StrDict = get_table(data, "apply") or {}
        aws: StrDict = get_table(data, "aws") or {}

        interval = get_number(apply, "interval")
        timeout = get_number(apply, "timeout")
        fail_on_noop = get_bool(apply, "fail_on_noop")
        log_level = get_int(apply, "log_level")
        if log_level is not None and not 0 <= log_level <= 3:
            raise ValueError(f"apply.log_level must be between 0 and 3, got {log_level}")

        return cls(
            apply=ApplySettings(
                interval=DEFAULT_INTERVAL_SECONDS if interval is None else interval,
                timeout=DEFAULT_TIMEOUT_SECONDS if timeout is None else timeout,
                fail_on_noop=False if fail_on_noop is None else fail_on_noop,
                log_level=DEFAULT_LOG_LEVEL if log_level is None else log_level,
            ),
            aws=AwsSettings(
                region=get_str(aws, "region"),
                endpoint_url=get_str(aws, "endpoint_url"),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_settings(path: Path) -> Result[Settings, ConfigError]:
    """Load settings from a TOML file.

    Args:
        path: Path to the config file

    Returns:
        Ok(Settings) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Settings.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def resolve_settings(explicit: Path | None, *, cwd: Path) -> Result[Settings, ConfigError]:
    """Load the explicitly named config, or ``cfncli.toml`` from cwd if present.

    A missing default file yields default settings; a missing explicit file
    is an error.
    """
    if explicit is not None:
        return load_settings(explicit.expanduser())

    candidate = cwd / CONFIG_FILENAME
    if not candidate.is_file():
        return Ok(Settings())
    return load_settings(candidate)
