from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from cfncli.core.config import Settings, resolve_settings
from cfncli.core.errors import ErrorCode
from cfncli.core.result import Err
from cfncli.output.console import ConsoleProtocol, LogLevel, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    settings: Settings
    console: ConsoleProtocol


def build_context(*, config_path: Path | None, log_level: int | None) -> CLIContext:
    settings_result = resolve_settings(config_path, cwd=Path.cwd())
    if isinstance(settings_result, Err):
        typer.echo(f"error: {settings_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    settings = settings_result.value
    level = LogLevel(settings.apply.log_level if log_level is None else log_level)
    return CLIContext(settings=settings, console=RichConsole(level=level))
