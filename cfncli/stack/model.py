from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum

from cfncli.core.result import Err, Ok, Result
from cfncli.stack.errors import ConfigurationError


class OnFailure(StrEnum):
    DO_NOTHING = "DO_NOTHING"
    ROLLBACK = "ROLLBACK"
    DELETE = "DELETE"


class Capability(StrEnum):
    CAPABILITY_IAM = "CAPABILITY_IAM"
    CAPABILITY_NAMED_IAM = "CAPABILITY_NAMED_IAM"
    CAPABILITY_AUTO_EXPAND = "CAPABILITY_AUTO_EXPAND"


@dataclass(frozen=True, slots=True)
class Parameter:
    parameter_key: str
    parameter_value: str

    def to_api(self) -> dict[str, str]:
        return {"ParameterKey": self.parameter_key, "ParameterValue": self.parameter_value}


@dataclass(frozen=True, slots=True)
class Tag:
    key: str
    value: str

    def to_api(self) -> dict[str, str]:
        return {"Key": self.key, "Value": self.value}


@dataclass(frozen=True, slots=True)
class ApplyOptions:
    """Raw ``apply`` options as supplied by the user.

    ``None`` means the option was not given. Presence, not value, is what the
    exclusivity checks look at.
    """

    stack_name: str
    template_body: str | None = None
    template_url: str | None = None
    parameters: tuple[str, ...] | None = None
    disable_rollback: bool | None = None
    on_failure: str | None = None
    capabilities: tuple[str, ...] | None = None
    resource_types: tuple[str, ...] | None = None
    stack_policy_body: str | None = None
    stack_policy_url: str | None = None
    tags: tuple[str, ...] | None = None
    notification_arns: tuple[str, ...] | None = None
    timeout_in_minutes: int | None = None

    def present(self) -> frozenset[str]:
        """Names of the options that were supplied."""
        names = (
            "stack_name",
            "template_body",
            "template_url",
            "parameters",
            "disable_rollback",
            "on_failure",
            "capabilities",
            "resource_types",
            "stack_policy_body",
            "stack_policy_url",
            "tags",
            "notification_arns",
            "timeout_in_minutes",
        )
        return frozenset(n for n in names if getattr(self, n) is not None)


@dataclass(frozen=True, slots=True)
class StackRequest:
    """Normalized, API-ready description of one deployment intent."""

    stack_name: str
    template_body: str | None = None
    template_url: str | None = None
    parameters: tuple[Parameter, ...] = ()
    disable_rollback: bool | None = None
    on_failure: OnFailure | None = None
    capabilities: frozenset[Capability] = frozenset()
    resource_types: tuple[str, ...] = ()
    stack_policy_body: str | None = None
    stack_policy_url: str | None = None
    tags: tuple[Tag, ...] = ()
    notification_arns: tuple[str, ...] = ()
    timeout_in_minutes: int | None = None

    def _common_kwargs(self, token: str) -> dict[str, object]:
        kwargs: dict[str, object] = {
            "StackName": self.stack_name,
            "ClientRequestToken": token,
        }
        if self.template_body is not None:
            kwargs["TemplateBody"] = self.template_body
        if self.template_url is not None:
            kwargs["TemplateURL"] = self.template_url
        if self.parameters:
            kwargs["Parameters"] = [p.to_api() for p in self.parameters]
        if self.capabilities:
            kwargs["Capabilities"] = sorted(c.value for c in self.capabilities)
        if self.resource_types:
            kwargs["ResourceTypes"] = list(self.resource_types)
        if self.stack_policy_body is not None:
            kwargs["StackPolicyBody"] = self.stack_policy_body
        if self.stack_policy_url is not None:
            kwargs["StackPolicyURL"] = self.stack_policy_url
        if self.tags:
            kwargs["Tags"] = [t.to_api() for t in self.tags]
        if self.notification_arns:
            kwargs["NotificationARNs"] = list(self.notification_arns)
        return kwargs

    def create_kwargs(self, token: str) -> dict[str, object]:
        """Keyword arguments for ``CreateStack``."""
        kwargs = self._common_kwargs(token)
        if self.disable_rollback is not None:
            kwargs["DisableRollback"] = self.disable_rollback
        if self.on_failure is not None:
            kwargs["OnFailure"] = self.on_failure.value
        if self.timeout_in_minutes is not None:
            kwargs["TimeoutInMinutes"] = self.timeout_in_minutes
        return kwargs

    def update_kwargs(self, token: str) -> dict[str, object]:
        """Keyword arguments for ``UpdateStack``.

        UpdateStack has no OnFailure or TimeoutInMinutes; both are dropped.
        """
        kwargs = self._common_kwargs(token)
        if self.disable_rollback is not None:
            kwargs["DisableRollback"] = self.disable_rollback
        return kwargs


@dataclass(frozen=True, slots=True)
class PollingPolicy:
    interval_seconds: float
    max_attempts: int
    fail_on_noop: bool = False

    @classmethod
    def from_timeout(
        cls, *, interval: float, timeout: float, fail_on_noop: bool = False
    ) -> Result[PollingPolicy, ConfigurationError]:
        """Derive the attempt budget as ``floor(timeout / interval)``."""
        if interval <= 0:
            return Err(
                ConfigurationError(
                    f"interval must be greater than 0, got {interval:g}",
                    options=("interval",),
                )
            )
        if timeout < 0:
            return Err(
                ConfigurationError(
                    f"timeout must not be negative, got {timeout:g}",
                    options=("timeout",),
                )
            )
        return Ok(
            cls(
                interval_seconds=interval,
                max_attempts=math.floor(timeout / interval),
                fail_on_noop=fail_on_noop,
            )
        )


@dataclass(frozen=True, slots=True)
class Succeeded:
    stack_id: str
    status: str | None = None
    noop: bool = False


@dataclass(frozen=True, slots=True)
class Failed:
    reason: str
    connectivity: bool = False


@dataclass(frozen=True, slots=True)
class NoOpDetected:
    stack_name: str


@dataclass(frozen=True, slots=True)
class TimedOut:
    attempts: int


@dataclass(frozen=True, slots=True)
class Cancelled:
    attempts: int


DeploymentOutcome = Succeeded | Failed | NoOpDetected | TimedOut | Cancelled
