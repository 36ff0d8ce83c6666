from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from time import sleep
from typing import Any, Literal, Protocol

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from cfncli.core.result import Err, Ok, Result
from cfncli.core.structured import as_obj_list, as_str_dict, get_str
from cfncli.services.timeouts import (
    EVENTS_PAGE_SIZE,
    QUERY_RETRY_ATTEMPTS,
    QUERY_RETRY_DELAY_SECONDS,
)
from cfncli.stack.model import StackRequest
from cfncli.stack.status import StackEvent

ApiErrorKind = Literal["validation", "no_updates", "transient", "failed"]

_TRANSIENT_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "ServiceUnavailable",
        "InternalFailure",
        "InternalError",
        "RequestTimeout",
        "RequestTimeoutException",
    }
)

_TRANSIENT_EXCEPTIONS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

_NO_UPDATES_MARKER = "no updates are to be performed"
_MISSING_STACK_MARKER = "does not exist"


class CloudFormationClient(Protocol):
    """The subset of the boto3 CloudFormation client cfncli calls."""

    def create_stack(self, **kwargs: Any) -> Mapping[str, Any]: ...

    def update_stack(self, **kwargs: Any) -> Mapping[str, Any]: ...

    def describe_stacks(self, **kwargs: Any) -> Mapping[str, Any]: ...

    def describe_stack_events(self, **kwargs: Any) -> Mapping[str, Any]: ...


@dataclass(frozen=True, slots=True)
class ApiError:
    kind: ApiErrorKind
    message: str
    code: str | None = None


def make_client(*, region: str | None = None, endpoint_url: str | None = None) -> CloudFormationClient:
    import boto3

    return boto3.client("cloudformation", region_name=region, endpoint_url=endpoint_url)


def classify_error(error: ClientError | BotoCoreError) -> ApiError:
    if isinstance(error, ClientError):
        err = as_str_dict(error.response.get("Error")) or {}
        code = get_str(err, "Code")
        message = get_str(err, "Message") or str(error)
        meta = as_str_dict(error.response.get("ResponseMetadata")) or {}
        status = meta.get("HTTPStatusCode")

        if code in _TRANSIENT_CODES or (isinstance(status, int) and status >= 500):
            return ApiError(kind="transient", message=message, code=code)
        if code == "ValidationError" and _NO_UPDATES_MARKER in message.lower():
            return ApiError(kind="no_updates", message=message, code=code)
        if code == "ValidationError":
            return ApiError(kind="validation", message=message, code=code)
        return ApiError(kind="failed", message=message, code=code)

    if isinstance(error, _TRANSIENT_EXCEPTIONS):
        return ApiError(kind="transient", message=str(error))
    return ApiError(kind="failed", message=str(error))


class CloudFormationApi:
    """Result-returning wrapper over a boto3 CloudFormation client.

    Reads are retried on transient errors (throttling, network faults) with a
    linear backoff; writes are attempted once.
    """

    def __init__(
        self,
        client: CloudFormationClient,
        *,
        retry_attempts: int = QUERY_RETRY_ATTEMPTS,
    ) -> None:
        self._client = client
        self._retry_attempts = max(1, retry_attempts)

    def _call(
        self,
        fn: Callable[[], Mapping[str, Any]],
        *,
        retry: bool,
    ) -> Result[Mapping[str, Any], ApiError]:
        attempts = self._retry_attempts if retry else 1
        for attempt in range(attempts):
            try:
                return Ok(fn())
            except (ClientError, BotoCoreError) as e:
                error = classify_error(e)

            if attempt < attempts - 1 and error.kind == "transient":
                sleep(QUERY_RETRY_DELAY_SECONDS * (attempt + 1))
                continue

            return Err(error)

        return Err(ApiError(kind="failed", message="no attempts made"))

    def find_stack_id(self, stack_name: str) -> Result[str | None, ApiError]:
        """Stack id (ARN) of an existing stack, or None when there is none."""
        result = self._call(lambda: self._client.describe_stacks(StackName=stack_name), retry=True)
        if isinstance(result, Err):
            e = result.error
            if e.kind == "validation" and _MISSING_STACK_MARKER in e.message.lower():
                return Ok(None)
            return result

        for item in as_obj_list(result.value.get("Stacks")) or []:
            data = as_str_dict(item)
            stack_id = get_str(data, "StackId") if data is not None else None
            if stack_id:
                return Ok(stack_id)
        return Ok(None)

    def create_stack(self, request: StackRequest, *, token: str) -> Result[str, ApiError]:
        """Submit CreateStack; returns the new stack id."""
        kwargs = request.create_kwargs(token)
        return self._submit(lambda: self._client.create_stack(**kwargs), request.stack_name)

    def update_stack(self, request: StackRequest, *, token: str) -> Result[str, ApiError]:
        """Submit UpdateStack; returns the stack id."""
        kwargs = request.update_kwargs(token)
        return self._submit(lambda: self._client.update_stack(**kwargs), request.stack_name)

    def _submit(
        self, fn: Callable[[], Mapping[str, Any]], stack_name: str
    ) -> Result[str, ApiError]:
        result = self._call(fn, retry=False)
        if isinstance(result, Err):
            return result
        stack_id = result.value.get("StackId")
        if not isinstance(stack_id, str) or not stack_id:
            return Err(ApiError(kind="failed", message=f"no StackId returned for {stack_name}"))
        return Ok(stack_id)

    def describe_stack_events(self, stack_id: str) -> Result[list[StackEvent], ApiError]:
        """Most recent events for the stack, newest first."""
        result = self._call(
            lambda: self._client.describe_stack_events(StackName=stack_id),
            retry=True,
        )
        if isinstance(result, Err):
            return result

        raw = as_obj_list(result.value.get("StackEvents"))
        if raw is None:
            return Err(ApiError(kind="failed", message=f"unexpected events payload for {stack_id}"))

        events: list[StackEvent] = []
        for item in raw[:EVENTS_PAGE_SIZE]:
            data = as_str_dict(item)
            if data is None:
                continue
            event = StackEvent.from_api(data)
            if event is not None:
                events.append(event)
        return Ok(events)
