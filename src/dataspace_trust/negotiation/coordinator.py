# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Negotiation Coordinator

Two-party exchange that finds a data trustee both sides trust.

Initiator: send the local registry to a counterparty and wait for its
answer. Responder: intersect the initiator's candidates with the local
registry, choose the first match in registry order, notify it in the
background and answer immediately.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

import httpx

from dataspace_trust.constants import (
    DEFAULT_NEGOTIATION_TIMEOUT_SECONDS,
    DEFAULT_NOTIFY_TIMEOUT_SECONDS,
    NOTIFY_PATH,
)
from dataspace_trust.observability import record_negotiation, record_notification
from dataspace_trust.participants import Participant, ParticipantRegistry

from .models import (
    DataTrusteeNotification,
    InitiationResult,
    NegotiationRequest,
    NegotiationResponse,
)

logger = logging.getLogger(__name__)

_CLIENT_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


def notify_url(endpoint: str) -> str:
    """Notification address derived from a participant endpoint."""
    return endpoint.rstrip("/") + NOTIFY_PATH


class NegotiationCoordinator:
    """Runs both sides of the trustee negotiation.

    Args:
        registry: Registry shared with the rest of the service.
        participant_id: This connector's id, used as the default data source.
        timeout_seconds: Bound on the initiator's round trip.
        notify_timeout_seconds: Bound on each background notification.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
    """

    def __init__(
        self,
        registry: ParticipantRegistry,
        participant_id: str = "",
        timeout_seconds: float = DEFAULT_NEGOTIATION_TIMEOUT_SECONDS,
        notify_timeout_seconds: float = DEFAULT_NOTIFY_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got: {timeout_seconds}")
        if notify_timeout_seconds <= 0:
            raise ValueError(
                f"notify_timeout_seconds must be positive, got: {notify_timeout_seconds}"
            )
        self.registry = registry
        self.participant_id = participant_id
        self.timeout_seconds = timeout_seconds
        self.notify_timeout_seconds = notify_timeout_seconds
        self._transport = transport
        self._notify_tasks: set[asyncio.Task] = set()

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    # -- initiator ---------------------------------------------------------

    async def negotiate(
        self,
        counterparty_address: str,
        data_source: Optional[str] = None,
        data_sink: Optional[str] = None,
        assets: Iterable[str] = (),
    ) -> InitiationResult:
        """Offer the local registry to a counterparty and return its answer.

        Never raises for transport problems: connection errors, timeouts and
        non-2xx answers come back as a failed ``InitiationResult``.
        """
        if not counterparty_address:
            return InitiationResult.failure("", "Counterparty address is required")

        request = NegotiationRequest(
            data_source=data_source or self.participant_id,
            data_sink=data_sink or "",
            assets=list(assets),
            trusted_candidates=self.registry.list(),
        )
        try:
            async with self._client(self.timeout_seconds) as client:
                response = await client.post(counterparty_address, json=request.to_wire())
        except _CLIENT_ERRORS as e:
            logger.warning("Failed to initiate negotiation with %s: %s", counterparty_address, e)
            record_negotiation("initiator", "error")
            return InitiationResult.failure(
                counterparty_address, f"Failed to send negotiation request: {e}"
            )

        if not response.is_success:
            logger.warning(
                "Negotiation with %s returned %s: %s",
                counterparty_address, response.status_code, response.text,
            )
            record_negotiation("initiator", "rejected")
            return InitiationResult.failure(
                counterparty_address,
                f"Counterparty responded with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info("Negotiation initiated with %s; response: %s", counterparty_address, response.text)
        record_negotiation("initiator", "completed")
        return InitiationResult.success(counterparty_address, response.status_code, response.text)

    # -- responder ---------------------------------------------------------

    async def receive_negotiation(self, request: NegotiationRequest) -> NegotiationResponse:
        """Choose a commonly trusted data trustee for *request*."""
        candidates = set(request.trusted_candidates)
        matches = [p for p in self.registry.list() if p in candidates]
        logger.info(
            "Received negotiation request from %s: %d candidates, %d matches",
            request.data_source or "unknown", len(candidates), len(matches),
        )
        if not matches:
            record_negotiation("responder", "no_match")
            return NegotiationResponse.no_common_trustee(request)

        # first match in registry order
        chosen = matches[0]
        if chosen.has_endpoint:
            self._schedule_notification(chosen, DataTrusteeNotification.for_request(request))
        else:
            logger.info("Chosen trustee %s has no endpoint; skipping notification", chosen.id)
        record_negotiation("responder", "matched")
        return NegotiationResponse.chosen(request, chosen)

    def _schedule_notification(
        self, trustee: Participant, notification: DataTrusteeNotification
    ) -> None:
        task = asyncio.get_running_loop().create_task(self._notify(trustee, notification))
        self._notify_tasks.add(task)
        task.add_done_callback(self._notify_tasks.discard)

    async def _notify(self, trustee: Participant, notification: DataTrusteeNotification) -> None:
        url = notify_url(trustee.endpoint or "")
        try:
            async with self._client(self.notify_timeout_seconds) as client:
                response = await asyncio.wait_for(
                    client.post(url, json=notification.to_wire()),
                    timeout=self.notify_timeout_seconds,
                )
                response.raise_for_status()
        except asyncio.TimeoutError:
            logger.warning("Notification to %s timed out after %ss", trustee.name, self.notify_timeout_seconds)
            record_notification("timeout")
            return
        except _CLIENT_ERRORS as e:
            logger.warning("Failed to send notification to %s: %s", trustee.name, e)
            record_notification("error")
            return
        except Exception:
            # detached task: nothing awaits it, so failures end here
            logger.exception("Unexpected error notifying %s", trustee.name)
            record_notification("error")
            return
        logger.info("Notification sent to %s; response: %s", trustee.name, response.text)
        record_notification("sent")

    @property
    def pending_notifications(self) -> int:
        return len(self._notify_tasks)

    async def drain(self) -> None:
        """Wait until every scheduled notification has finished."""
        while self._notify_tasks:
            await asyncio.gather(*list(self._notify_tasks), return_exceptions=True)
