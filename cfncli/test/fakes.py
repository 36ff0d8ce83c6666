"""In-memory CloudFormation client for tests.

The fake keeps an event history like the real service does and returns it
newest first. Each ``describe_stack_events`` call appends the next scripted
batch before answering.
"""

from __future__ import annotations

import itertools
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

STACK_NAME = "web"
STACK_ID = "arn:aws:cloudformation:eu-west-1:123456789012:stack/web/0a1b2c3d"
STACK_TYPE = "AWS::CloudFormation::Stack"

_ids = itertools.count(1)


def client_error(code: str, message: str, operation: str = "CreateStack", status: int = 400) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": message},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


def stack_event(
    status: str,
    reason: str | None = None,
    *,
    logical_id: str = STACK_NAME,
    resource_type: str = STACK_TYPE,
    physical_id: str | None = STACK_ID,
    timestamp: datetime | None = None,
) -> dict[str, Any]:
    event: dict[str, Any] = {
        "EventId": f"evt-{next(_ids)}",
        "StackId": STACK_ID,
        "StackName": STACK_NAME,
        "LogicalResourceId": logical_id,
        "ResourceType": resource_type,
        "Timestamp": timestamp or datetime.now(UTC),
        "ResourceStatus": status,
    }
    if physical_id is not None:
        event["PhysicalResourceId"] = physical_id
    if reason is not None:
        event["ResourceStatusReason"] = reason
    return event


def resource_event(
    status: str,
    reason: str | None = None,
    *,
    logical_id: str = "Bucket",
    timestamp: datetime | None = None,
) -> dict[str, Any]:
    return stack_event(
        status,
        reason,
        logical_id=logical_id,
        resource_type="AWS::S3::Bucket",
        physical_id=f"{STACK_NAME}-{logical_id.lower()}",
        timestamp=timestamp,
    )


Batch = Sequence[dict[str, Any]] | ClientError | BotoCoreError


@dataclass
class FakeCloudFormation:
    exists: bool = False
    batches: list[Batch] = field(default_factory=list)
    create_error: ClientError | None = None
    update_error: ClientError | None = None
    describe_error: ClientError | None = None
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    history: list[dict[str, Any]] = field(default_factory=list)
    token: str | None = None

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    def describe_stacks(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("describe_stacks", kwargs))
        if self.describe_error is not None:
            raise self.describe_error
        if not self.exists:
            raise client_error(
                "ValidationError",
                f"Stack with id {kwargs['StackName']} does not exist",
                "DescribeStacks",
            )
        return {"Stacks": [{"StackName": STACK_NAME, "StackId": STACK_ID, "StackStatus": "CREATE_COMPLETE"}]}

    def create_stack(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("create_stack", kwargs))
        self.token = kwargs.get("ClientRequestToken")
        if self.create_error is not None:
            raise self.create_error
        return {"StackId": STACK_ID}

    def update_stack(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("update_stack", kwargs))
        self.token = kwargs.get("ClientRequestToken")
        if self.update_error is not None:
            raise self.update_error
        return {"StackId": STACK_ID}

    def describe_stack_events(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("describe_stack_events", kwargs))
        batch: Batch = self.batches.pop(0) if self.batches else []
        if isinstance(batch, (ClientError, BotoCoreError)):
            raise batch
        for event in batch:
            stamped = dict(event)
            stamped.setdefault("ClientRequestToken", self.token)
            self.history.append(stamped)
        return {"StackEvents": list(reversed(self.history))}
