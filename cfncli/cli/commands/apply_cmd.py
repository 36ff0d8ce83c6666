"""Apply command - create or update a stack and wait for it to settle."""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer

from cfncli.cli.context import build_context
from cfncli.cli.report import (
    option_error_exit_code,
    outcome_exit_code,
    print_option_error,
    print_outcome,
)
from cfncli.core.errors import ErrorCode
from cfncli.core.result import Err
from cfncli.services.cloudformation import CloudFormationApi, make_client
from cfncli.services.deployer import DeploymentClient
from cfncli.stack.model import ApplyOptions, PollingPolicy
from cfncli.stack.options import process_options


def _opt_tuple(values: list[str] | None) -> tuple[str, ...] | None:
    if not values:
        return None
    return tuple(values)


@contextmanager
def _cancel_on_sigterm() -> Iterator[threading.Event]:
    cancel = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    def _handler(signum: int, frame: object) -> None:
        del signum, frame
        cancel.set()

    previous = signal.signal(signal.SIGTERM, _handler)
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGTERM, previous)


def apply(
    stack_name: str = typer.Option(..., "--stack-name", help="CloudFormation stack name"),
    template_body: str | None = typer.Option(
        None,
        "--template-body",
        help="Template body, or @filename to read it from a file. Exclusive with --template-url",
        show_default=False,
    ),
    template_url: str | None = typer.Option(
        None,
        "--template-url",
        help="S3 URL of the template. Exclusive with --template-body",
        show_default=False,
    ),
    parameters: list[str] | None = typer.Option(
        None,
        "--parameters",
        "-p",
        help="Stack parameter as KEY:VALUE or KEY=VALUE (repeatable), or @file.json",
        show_default=False,
    ),
    disable_rollback: bool | None = typer.Option(
        None,
        "--disable-rollback/--enable-rollback",
        help="Disable rollback on failure. Exclusive with --on-failure",
        show_default=False,
    ),
    timeout_in_minutes: int | None = typer.Option(
        None,
        "--timeout-in-minutes",
        help="Stack creation timeout enforced by CloudFormation (minutes)",
        show_default=False,
    ),
    notification_arns: list[str] | None = typer.Option(
        None,
        "--notification-arns",
        help="SNS topic ARN for stack events (repeatable)",
        show_default=False,
    ),
    capabilities: list[str] | None = typer.Option(
        None,
        "--capabilities",
        help="CAPABILITY_IAM, CAPABILITY_NAMED_IAM or CAPABILITY_AUTO_EXPAND (repeatable)",
        show_default=False,
    ),
    resource_types: list[str] | None = typer.Option(
        None,
        "--resource-types",
        help="Resource type allowed in this operation, e.g. AWS::EC2::* (repeatable)",
        show_default=False,
    ),
    on_failure: str | None = typer.Option(
        None,
        "--on-failure",
        help="DO_NOTHING, ROLLBACK or DELETE. Exclusive with --disable-rollback",
        show_default=False,
    ),
    stack_policy_body: str | None = typer.Option(
        None,
        "--stack-policy-body",
        help="Stack policy JSON, or @filename. Exclusive with --stack-policy-url",
        show_default=False,
    ),
    stack_policy_url: str | None = typer.Option(
        None,
        "--stack-policy-url",
        help="S3 URL of the stack policy. Exclusive with --stack-policy-body",
        show_default=False,
    ),
    tags: list[str] | None = typer.Option(
        None,
        "--tags",
        help="Stack tag as KEY:VALUE or KEY=VALUE (repeatable), or @file.json",
        show_default=False,
    ),
    interval: float | None = typer.Option(
        None, "--interval", help="Seconds between event queries [default: 10]", show_default=False
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Seconds to wait for the stack [default: 1800]", show_default=False
    ),
    fail_on_noop: bool | None = typer.Option(
        None,
        "--fail-on-noop/--no-fail-on-noop",
        help="Fail when the stack has nothing to update",
        show_default=False,
    ),
    log_level: int | None = typer.Option(
        None,
        "--log-level",
        min=0,
        max=3,
        help="0=DEBUG, 1=INFO, 2=ERROR, 3=CRITICAL [default: 1]",
        show_default=False,
    ),
    region: str | None = typer.Option(None, "--region", help="AWS region", show_default=False),
    endpoint_url: str | None = typer.Option(
        None, "--endpoint-url", help="Override the CloudFormation endpoint", show_default=False
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        envvar="CFNCLI_CONFIG",
        help="Config file (default: ./cfncli.toml if present)",
        show_default=False,
    ),
) -> None:
    """Create or update a stack and wait until it settles."""
    ctx = build_context(config_path=config, log_level=log_level)
    defaults = ctx.settings.apply

    policy = PollingPolicy.from_timeout(
        interval=defaults.interval if interval is None else interval,
        timeout=defaults.timeout if timeout is None else timeout,
        fail_on_noop=defaults.fail_on_noop if fail_on_noop is None else fail_on_noop,
    )
    if isinstance(policy, Err):
        print_option_error(policy.error, ctx.console)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    request = process_options(
        ApplyOptions(
            stack_name=stack_name,
            template_body=template_body,
            template_url=template_url,
            parameters=_opt_tuple(parameters),
            disable_rollback=disable_rollback,
            on_failure=on_failure,
            capabilities=_opt_tuple(capabilities),
            resource_types=_opt_tuple(resource_types),
            stack_policy_body=stack_policy_body,
            stack_policy_url=stack_policy_url,
            tags=_opt_tuple(tags),
            notification_arns=_opt_tuple(notification_arns),
            timeout_in_minutes=timeout_in_minutes,
        )
    )
    if isinstance(request, Err):
        print_option_error(request.error, ctx.console)
        raise typer.Exit(code=option_error_exit_code(request.error))

    client = make_client(
        region=region or ctx.settings.aws.region,
        endpoint_url=endpoint_url or ctx.settings.aws.endpoint_url,
    )
    with _cancel_on_sigterm() as cancel:
        deployer = DeploymentClient(
            CloudFormationApi(client), policy.value, ctx.console, cancel=cancel
        )
        outcome = deployer.deploy(request.value)

    print_outcome(outcome, stack_name=request.value.stack_name, console=ctx.console)
    code = outcome_exit_code(outcome)
    if code != int(ErrorCode.OK):
        raise typer.Exit(code=code)
