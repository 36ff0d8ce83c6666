"""Stack event values and status classification.

The polling loop never compares status strings itself; each status is
classified once here into a ``StatusKind``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Mapping

from cfncli.core.structured import get_str

STACK_RESOURCE_TYPE = "AWS::CloudFormation::Stack"

SUCCESS_STATUSES = frozenset(
    {
        "CREATE_COMPLETE",
        "UPDATE_COMPLETE",
        "IMPORT_COMPLETE",
    }
)

FAILURE_STATUSES = frozenset(
    {
        "CREATE_FAILED",
        "UPDATE_FAILED",
        "ROLLBACK_COMPLETE",
        "ROLLBACK_FAILED",
        "DELETE_COMPLETE",
        "DELETE_FAILED",
        "UPDATE_ROLLBACK_COMPLETE",
        "UPDATE_ROLLBACK_FAILED",
        "IMPORT_ROLLBACK_COMPLETE",
        "IMPORT_ROLLBACK_FAILED",
    }
)

# Statuses whose reason usually explains a later failed terminal status.
_CAUSE_STATUSES = frozenset(
    {
        "ROLLBACK_IN_PROGRESS",
        "UPDATE_ROLLBACK_IN_PROGRESS",
        "IMPORT_ROLLBACK_IN_PROGRESS",
    }
)


class StatusKind(Enum):
    SUCCEEDED = auto()
    FAILED = auto()
    IN_PROGRESS = auto()


def classify_status(status: str) -> StatusKind:
    if status in SUCCESS_STATUSES:
        return StatusKind.SUCCEEDED
    if status in FAILURE_STATUSES:
        return StatusKind.FAILED
    return StatusKind.IN_PROGRESS


@dataclass(frozen=True, slots=True)
class StackEvent:
    event_id: str
    stack_id: str
    stack_name: str
    logical_resource_id: str
    physical_resource_id: str | None
    resource_type: str
    timestamp: datetime | None
    status: str
    status_reason: str | None = None
    client_request_token: str | None = None

    @classmethod
    def from_api(cls, data: Mapping[str, object]) -> StackEvent | None:
        """Build from one ``StackEvents`` entry; None if required keys are missing."""
        event_id = get_str(data, "EventId")
        stack_id = get_str(data, "StackId")
        status = get_str(data, "ResourceStatus")
        if event_id is None or stack_id is None or status is None:
            return None

        timestamp = data.get("Timestamp")
        return cls(
            event_id=event_id,
            stack_id=stack_id,
            stack_name=get_str(data, "StackName") or "",
            logical_resource_id=get_str(data, "LogicalResourceId") or "",
            physical_resource_id=get_str(data, "PhysicalResourceId"),
            resource_type=get_str(data, "ResourceType") or "",
            timestamp=timestamp if isinstance(timestamp, datetime) else None,
            status=status,
            status_reason=get_str(data, "ResourceStatusReason"),
            client_request_token=get_str(data, "ClientRequestToken"),
        )

    @property
    def kind(self) -> StatusKind:
        return classify_status(self.status)

    def is_stack_event(self, stack_id: str) -> bool:
        """True for the top-level stack resource, False for nested stacks and resources."""
        if self.resource_type != STACK_RESOURCE_TYPE:
            return False
        if self.physical_resource_id is not None:
            return self.physical_resource_id == stack_id
        return self.logical_resource_id == self.stack_name

    def failure_cause(self) -> str | None:
        """Reason text worth remembering as the cause of a failed deployment."""
        if not self.status_reason:
            return None
        if self.status.endswith("_FAILED") or self.status in _CAUSE_STATUSES:
            return self.status_reason
        return None

    def describe(self) -> str:
        line = f"{self.status} {self.resource_type} {self.logical_resource_id}"
        if self.status_reason:
            line += f" ({self.status_reason})"
        return line
