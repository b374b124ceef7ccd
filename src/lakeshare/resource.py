"""Request-type dispatch shared by the four handlers."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from lakeshare.clients import ClientFactory, build_client
from lakeshare.config import Settings, fallback_settings, load_settings
from lakeshare.errors import UnsupportedOperationError
from lakeshare.responder import (
    CREATE,
    DELETE,
    UPDATE,
    Outcome,
    ResourceRequest,
    Transport,
    put_response,
    report_outcome,
)

LOGGER = logging.getLogger(__name__)

Operation = Callable[[ResourceRequest, Settings, ClientFactory], Optional[str]]


def apply_log_level(level: str) -> None:
    logger = logging.getLogger("lakeshare")
    try:
        logger.setLevel(level)
    except ValueError:
        logger.setLevel(logging.INFO)
        LOGGER.warning("Unknown log level %r, using INFO.", level)


def succeed_without_action(request: ResourceRequest, settings: Settings,
                           client_factory: ClientFactory) -> str | None:
    LOGGER.info("Nothing to clean up for %s.", request.logical_resource_id)
    return None


class CustomResource:
    """One Lambda-backed custom resource.

    ``on_create`` and ``on_delete`` return the physical resource id to report, or
    ``None`` to fall back to the id in the event or the log stream name. Update
    requests are always rejected. Exactly one response is delivered per call.
    """

    def __init__(
        self,
        name: str,
        *,
        on_create: Operation,
        on_delete: Operation = succeed_without_action,
        client_factory: ClientFactory = build_client,
        transport: Transport = put_response,
        settings_loader: Callable[[], Settings] = load_settings,
    ) -> None:
        self.name = name
        self.on_create = on_create
        self.on_delete = on_delete
        self.client_factory = client_factory
        self.transport = transport
        self.settings_loader = settings_loader

    def __call__(self, event: dict, context) -> dict | None:
        settings = fallback_settings()
        request = None
        outcome = Outcome.failed(f"{self.name} terminated before reaching a result.")
        try:
            settings = self.settings_loader()
            apply_log_level(settings.log_level)
            LOGGER.info("REQUEST RECEIVED by %s.", self.name)
            request = ResourceRequest.from_event(event)
            outcome = self.dispatch(request, settings)
        except Exception as e:
            LOGGER.exception("%s could not process the request", self.name)
            outcome = Outcome.failed(str(e) or type(e).__name__)
        finally:
            body = self.report(event, request, context, outcome, settings)
        return body

    def report(self, event, request: ResourceRequest | None, context, outcome: Outcome,
               settings: Settings) -> dict | None:
        request = request or ResourceRequest.from_partial_event(event)
        if request is None:
            LOGGER.error("Event carries no ResponseURL, %s result cannot be reported.", self.name)
            return None
        return report_outcome(
            request,
            context,
            outcome,
            region=settings.region,
            console_url=settings.log_console_url,
            timeout=settings.response_timeout,
            transport=self.transport,
        )

    def operation_for(self, request_type: str) -> Operation:
        if request_type == CREATE:
            return self.on_create
        if request_type == DELETE:
            return self.on_delete
        if request_type == UPDATE:
            raise UnsupportedOperationError("RequestType is Update which is not supported.")
        raise UnsupportedOperationError(f"Received unknown RequestType {request_type}.")

    def dispatch(self, request: ResourceRequest, settings: Settings) -> Outcome:
        try:
            operation = self.operation_for(request.request_type)
            physical_id = operation(request, settings, self.client_factory)
        except Exception as e:
            LOGGER.exception("%s %s failed", self.name, request.request_type)
            return Outcome.failed(str(e) or type(e).__name__)
        return Outcome.succeeded(physical_id)
