"""Submit a stack request and follow it to a terminal state.

One ``DeploymentClient`` drives one deployment:

    Submitted -> Polling -> Succeeded | Failed | NoOpDetected | TimedOut | Cancelled

Once the request has been submitted, every problem (API errors, failed
stacks, exhausted budgets) is reported as a ``DeploymentOutcome`` value;
nothing is raised past ``deploy``.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from time import sleep
from uuid import uuid4

from cfncli.core.result import Err
from cfncli.output.console import ConsoleProtocol
from cfncli.services.cloudformation import ApiError, CloudFormationApi
from cfncli.stack.model import (
    Cancelled,
    DeploymentOutcome,
    Failed,
    NoOpDetected,
    PollingPolicy,
    StackRequest,
    Succeeded,
    TimedOut,
)
from cfncli.stack.status import StackEvent, StatusKind


def new_request_token() -> str:
    return f"cfncli-{uuid4().hex[:12]}"


class _EventTracker:
    """Filters the event stream down to new events of one operation."""

    def __init__(self, *, stack_id: str, token: str, submitted_at: datetime) -> None:
        self._stack_id = stack_id
        self._token = token
        self._not_before = submitted_at
        self._seen: set[str] = set()
        self.cause: str | None = None

    def _belongs(self, event: StackEvent) -> bool:
        if event.client_request_token is not None:
            return event.client_request_token == self._token
        if event.timestamp is None:
            return False
        ts = event.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=UTC)
        return ts >= self._not_before

    def observe(self, events: list[StackEvent]) -> tuple[list[StackEvent], StackEvent | None]:
        """Record a newest-first page of events.

        Returns the unseen events of this operation (oldest first) and the
        newest top-level stack event if it is terminal.
        """
        fresh: list[StackEvent] = []
        for event in reversed(events):
            if event.event_id in self._seen or not self._belongs(event):
                continue
            self._seen.add(event.event_id)
            fresh.append(event)
            if self.cause is None:
                self.cause = event.failure_cause()

        stack_events = [e for e in fresh if e.is_stack_event(self._stack_id)]
        if not stack_events:
            return fresh, None
        latest = stack_events[-1]
        if latest.kind is StatusKind.IN_PROGRESS:
            return fresh, None
        return fresh, latest


class DeploymentClient:
    """Convert an asynchronous stack operation into one synchronous outcome."""

    def __init__(
        self,
        api: CloudFormationApi,
        policy: PollingPolicy,
        console: ConsoleProtocol,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        self._api = api
        self._policy = policy
        self._console = console
        self._cancel = cancel

    def deploy(self, request: StackRequest) -> DeploymentOutcome:
        name = request.stack_name
        token = new_request_token()

        existing = self._api.find_stack_id(name)
        if isinstance(existing, Err):
            return self._api_failure(existing.error, f"could not look up stack {name}")

        existing_id = existing.value
        action = "create" if existing_id is None else "update"
        self._console.info(f"{action} stack {name}")
        self._console.debug(f"client request token: {token}")

        submitted_at = datetime.now(UTC)
        submitted = (
            self._api.create_stack(request, token=token)
            if existing_id is None
            else self._api.update_stack(request, token=token)
        )
        if isinstance(submitted, Err):
            if submitted.error.kind == "no_updates" and existing_id is not None:
                return self._no_changes(request, stack_id=existing_id)
            return self._api_failure(submitted.error, f"stack {action} rejected")

        stack_id = submitted.value
        self._console.debug(f"stack id: {stack_id}")
        return self._poll(stack_id=stack_id, token=token, submitted_at=submitted_at)

    def _poll(self, *, stack_id: str, token: str, submitted_at: datetime) -> DeploymentOutcome:
        tracker = _EventTracker(stack_id=stack_id, token=token, submitted_at=submitted_at)
        queries = 0

        for _ in range(self._policy.max_attempts):
            if self._wait(self._policy.interval_seconds):
                return self._cancelled(queries)

            queries += 1
            try:
                result = self._api.describe_stack_events(stack_id)
            except KeyboardInterrupt:
                return self._cancelled(queries)
            if isinstance(result, Err):
                return self._api_failure(result.error, "could not query stack events")

            fresh, terminal = tracker.observe(result.value)
            for event in fresh:
                self._console.debug(event.describe())

            if terminal is not None:
                return self._conclude(terminal, stack_id=stack_id, cause=tracker.cause)

        return TimedOut(attempts=queries)

    def _wait(self, seconds: float) -> bool:
        """Wait between polls; True if cancelled."""
        try:
            if self._cancel is None:
                sleep(seconds)
                return False
            return self._cancel.wait(seconds)
        except KeyboardInterrupt:
            return True

    def _cancelled(self, queries: int) -> DeploymentOutcome:
        self._console.warning("cancelled; the stack operation continues remotely")
        return Cancelled(attempts=queries)

    def _conclude(self, event: StackEvent, *, stack_id: str, cause: str | None) -> DeploymentOutcome:
        if event.kind is StatusKind.SUCCEEDED:
            return Succeeded(stack_id=stack_id, status=event.status)
        reason = event.status_reason or cause or event.status
        return Failed(reason=f"{event.status}: {reason}" if reason != event.status else reason)

    def _no_changes(self, request: StackRequest, *, stack_id: str) -> DeploymentOutcome:
        self._console.info(f"no updates to perform on {request.stack_name}")
        if self._policy.fail_on_noop:
            return NoOpDetected(stack_name=request.stack_name)
        return Succeeded(stack_id=stack_id, noop=True)

    def _api_failure(self, error: ApiError, context: str) -> DeploymentOutcome:
        return Failed(
            reason=f"{context}: {error.message}",
            connectivity=error.kind == "transient",
        )
