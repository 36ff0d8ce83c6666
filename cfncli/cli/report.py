"""Outcome presentation and exit code mapping.

Every invocation ends with exactly one summary line, printed here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cfncli.core.errors import ErrorCode
from cfncli.output.console import Style
from cfncli.stack.errors import ConfigurationError, ContentResolutionError, OptionError
from cfncli.stack.model import (
    Cancelled,
    DeploymentOutcome,
    Failed,
    NoOpDetected,
    Succeeded,
    TimedOut,
)

if TYPE_CHECKING:
    from cfncli.output.console import ConsoleProtocol

__all__ = [
    "option_error_exit_code",
    "outcome_exit_code",
    "print_option_error",
    "print_outcome",
]


def print_option_error(error: OptionError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def option_error_exit_code(error: OptionError) -> int:
    match error:
        case ConfigurationError():
            return int(ErrorCode.USER_ERROR)
        case ContentResolutionError():
            return int(ErrorCode.IO_ERROR)


def print_outcome(outcome: DeploymentOutcome, *, stack_name: str, console: ConsoleProtocol) -> None:
    match outcome:
        case Succeeded(noop=True):
            console.success(f"stack {stack_name}: nothing to update")
        case Succeeded(status=status):
            console.success(f"stack {stack_name}: deployment successful ({status})")
        case Failed(reason=reason, connectivity=connectivity):
            console.error(f"stack {stack_name}: deployment failed: {reason}")
            if connectivity:
                console.print("hint: check network access and AWS credentials", Style.DIM)
        case NoOpDetected():
            console.error(f"stack {stack_name}: nothing to update (--fail-on-noop is set)")
        case TimedOut(attempts=attempts):
            console.error(
                f"stack {stack_name}: timed out after {attempts} polls; "
                "the stack may still be in progress"
            )
        case Cancelled(attempts=attempts):
            console.error(
                f"stack {stack_name}: cancelled after {attempts} polls; "
                "the stack operation was not rolled back"
            )


def outcome_exit_code(outcome: DeploymentOutcome) -> int:
    match outcome:
        case Succeeded():
            return int(ErrorCode.OK)
        case Failed(connectivity=True):
            return int(ErrorCode.NETWORK_ERROR)
        case Failed():
            return int(ErrorCode.DEPLOY_ERROR)
        case NoOpDetected():
            return int(ErrorCode.NOOP)
        case TimedOut():
            return int(ErrorCode.TIMEOUT)
        case Cancelled():
            return int(ErrorCode.CANCELLED)
