"""Typed view of the custom resource event and delivery of the result payload."""
from __future__ import annotations

import json
import logging
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable

from lakeshare.errors import InvalidInputError

LOGGER = logging.getLogger(__name__)

SUCCESS = "SUCCESS"
FAILED = "FAILED"

CREATE = "Create"
UPDATE = "Update"
DELETE = "Delete"

LOG_POINTER = "See the details in CloudWatch Log Stream: {url}"

Transport = Callable[[str, bytes, int], None]


@dataclass(frozen=True)
class ResourceRequest:
    request_type: str
    stack_id: str
    request_id: str
    logical_resource_id: str
    response_url: str
    properties: dict[str, Any]
    physical_resource_id: str | None = None

    @classmethod
    def from_event(cls, event: dict) -> "ResourceRequest":
        try:
            return cls(
                request_type=event["RequestType"],
                stack_id=event["StackId"],
                request_id=event["RequestId"],
                logical_resource_id=event["LogicalResourceId"],
                response_url=event["ResponseURL"],
                properties=event.get("ResourceProperties") or {},
                physical_resource_id=event.get("PhysicalResourceId"),
            )
        except (KeyError, TypeError) as e:
            raise InvalidInputError(f"Malformed custom resource event, missing {e}.") from e

    @classmethod
    def from_partial_event(cls, event) -> "ResourceRequest | None":
        """Best-effort request for reporting a failure on a malformed event.

        Returns None when there is no ResponseURL to report to.
        """
        if not isinstance(event, dict) or not event.get("ResponseURL"):
            return None
        properties = event.get("ResourceProperties")
        return cls(
            request_type=str(event.get("RequestType", "")),
            stack_id=str(event.get("StackId", "")),
            request_id=str(event.get("RequestId", "")),
            logical_resource_id=str(event.get("LogicalResourceId", "")),
            response_url=event["ResponseURL"],
            properties=properties if isinstance(properties, dict) else {},
            physical_resource_id=event.get("PhysicalResourceId"),
        )

    def prop(self, name: str):
        return self.properties.get(name)


@dataclass(frozen=True)
class Outcome:
    status: str
    physical_resource_id: str | None = None
    reason: str | None = None

    @classmethod
    def succeeded(cls, physical_resource_id: str | None = None) -> "Outcome":
        return cls(SUCCESS, physical_resource_id)

    @classmethod
    def failed(cls, reason: str, physical_resource_id: str | None = None) -> "Outcome":
        return cls(FAILED, physical_resource_id, reason)


def compose_reason(reason: str | None, context, *, region: str, console_url: str) -> str:
    url = console_url.format(
        region=region,
        log_group=getattr(context, "log_group_name", ""),
        log_stream=getattr(context, "log_stream_name", ""),
    )
    pointer = LOG_POINTER.format(url=url)
    return f"{reason} {pointer}" if reason else pointer


def resolve_physical_id(outcome: Outcome, request: ResourceRequest, context) -> str:
    return (
        outcome.physical_resource_id
        or request.physical_resource_id
        or getattr(context, "log_stream_name", "")
    )


def build_response_body(request: ResourceRequest, context, outcome: Outcome, *,
                        region: str, console_url: str) -> dict:
    return {
        "Status": outcome.status,
        "Reason": compose_reason(outcome.reason, context, region=region, console_url=console_url),
        "PhysicalResourceId": resolve_physical_id(outcome, request, context),
        "StackId": request.stack_id,
        "RequestId": request.request_id,
        "LogicalResourceId": request.logical_resource_id,
        "Data": {},
    }


def put_response(url: str, body: bytes, timeout: int) -> None:
    req = urllib.request.Request(
        url,
        data=body,
        method="PUT",
        headers={"content-type": "", "content-length": str(len(body))},
    )
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        LOGGER.info("Response delivered, status code %s", resp.status)


def report_outcome(request: ResourceRequest, context, outcome: Outcome, *, region: str,
                   console_url: str, timeout: int = 10,
                   transport: Transport = put_response) -> dict:
    """Deliver ``outcome`` to the ResponseURL of ``request``.

    Delivery problems are logged and never raised; the invocation must still end
    cleanly so the orchestrator can time the resource out on its own.
    """
    body = build_response_body(request, context, outcome, region=region, console_url=console_url)
    payload = json.dumps(body)
    LOGGER.info("RESPONSE BODY: %s", payload)
    try:
        transport(request.response_url, payload.encode("utf-8"), timeout)
    except Exception:
        LOGGER.exception("Failed to deliver response to %s", request.response_url)
    return body
