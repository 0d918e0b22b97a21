"""Tests for the trustee negotiation coordinator (both sides)."""

import asyncio
import json
import logging

import httpx
import pytest
from prometheus_client import REGISTRY

from dataspace_trust.negotiation import (
    DataTrusteeNotification,
    InitiationResult,
    NegotiationCoordinator,
    NegotiationRequest,
    NegotiationResponse,
    notify_url,
)
from dataspace_trust.participants import Participant, ParticipantRegistry


COUNTERPARTY = "https://counterparty.example.com/trusted-participants/receive-negotiation"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler=None):
        self.requests: list[httpx.Request] = []
        handler = handler or (lambda request: httpx.Response(200, text="ok"))

        async def _record(request: httpx.Request):
            self.requests.append(request)
            result = handler(request)
            if asyncio.iscoroutine(result):
                result = await result
            return result

        super().__init__(_record)


def _trustee(ident: str, endpoint: str = None) -> Participant:
    return Participant(id=ident, name=ident.upper(), endpoint=endpoint)


def _request(*candidates, **kwargs) -> NegotiationRequest:
    return NegotiationRequest(
        data_source=kwargs.get("data_source", "did:web:provider"),
        data_sink=kwargs.get("data_sink", "did:web:consumer"),
        assets=kwargs.get("assets", ["asset-1"]),
        trusted_candidates=list(candidates),
    )


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------

class TestWireModels:
    """camelCase serialisation and lenient parsing."""

    def test_request_uses_camel_case(self):
        wire = _request(_trustee("a")).to_wire()
        assert set(wire) == {"dataSource", "dataSink", "assets", "trustedCandidates"}
        assert wire["trustedCandidates"][0]["id"] == "a"

    def test_request_accepts_legacy_key_and_bare_ids(self):
        request = NegotiationRequest.model_validate({
            "dataSource": "p",
            "trustedDataTrustees": ["did:web:a", {"id": "did:web:b", "url": "https://b.example.com"}],
        })
        assert [c.id for c in request.trusted_candidates] == ["did:web:a", "did:web:b"]
        assert request.trusted_candidates[1].endpoint == "https://b.example.com"

    def test_request_rejects_blank_candidate(self):
        with pytest.raises(ValueError):
            NegotiationRequest.model_validate({"trustedCandidates": [""]})

    def test_no_match_response(self):
        response = NegotiationResponse.no_common_trustee(_request())
        wire = response.to_wire()
        assert wire["chosenTrustee"] is None
        assert wire["message"] == "No commonly trusted data trustee found"
        assert not response.matched

    def test_notification_fields(self):
        wire = DataTrusteeNotification.for_request(_request(assets=["x", "y"])).to_wire()
        assert wire == {"dataSource": "did:web:provider", "dataSink": "did:web:consumer", "assets": ["x", "y"]}

    def test_initiation_payload(self):
        assert InitiationResult.success("u", 200, '{"a": 1}').payload() == '{"a": 1}'
        failed = InitiationResult.failure("u", "boom")
        assert json.loads(failed.payload()) == {"error": "boom"}

    @pytest.mark.parametrize("endpoint,expected", [
        ("https://t.example.com", "https://t.example.com/notify"),
        ("https://t.example.com/", "https://t.example.com/notify"),
        ("https://t.example.com/api", "https://t.example.com/api/notify"),
    ])
    def test_notify_url(self, endpoint, expected):
        assert notify_url(endpoint) == expected


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class TestCoordinatorConfig:

    def test_zero_timeout_raises_value_error(self):
        with pytest.raises(ValueError, match="timeout_seconds must be positive"):
            NegotiationCoordinator(ParticipantRegistry(), timeout_seconds=0)

    def test_negative_notify_timeout_raises_value_error(self):
        with pytest.raises(ValueError, match="notify_timeout_seconds must be positive"):
            NegotiationCoordinator(ParticipantRegistry(), notify_timeout_seconds=-1)


# ---------------------------------------------------------------------------
# Responder
# ---------------------------------------------------------------------------

class TestReceiveNegotiation:
    """Choosing a commonly trusted trustee."""

    def setup_method(self):
        self.transport = RecordingTransport()
        self.registry = ParticipantRegistry([
            _trustee("A", "https://a.example.com"),
            _trustee("B", "https://b.example.com"),
            _trustee("C", "https://c.example.com"),
        ])
        self.coordinator = NegotiationCoordinator(self.registry, transport=self.transport)

    @pytest.mark.asyncio
    async def test_chooses_first_match_in_registry_order(self):
        response = await self.coordinator.receive_negotiation(
            _request(Participant(id="D"), Participant(id="C"), Participant(id="B"))
        )
        assert response.matched
        assert response.chosen_trustee.id == "B"
        # the local record is returned, not the initiator's copy
        assert response.chosen_trustee.endpoint == "https://b.example.com"
        assert response.data_source == "did:web:provider"
        assert response.assets == ["asset-1"]
        await self.coordinator.drain()

    @pytest.mark.asyncio
    async def test_no_common_trustee(self):
        response = await self.coordinator.receive_negotiation(_request(Participant(id="Z")))
        assert response.chosen_trustee is None
        assert response.message == "No commonly trusted data trustee found"
        await self.coordinator.drain()
        assert self.transport.requests == []

    @pytest.mark.asyncio
    async def test_empty_candidates(self):
        response = await self.coordinator.receive_negotiation(_request())
        assert not response.matched

    @pytest.mark.asyncio
    async def test_notifies_chosen_trustee(self):
        await self.coordinator.receive_negotiation(_request(Participant(id="A"), assets=["x"]))
        await self.coordinator.drain()

        assert len(self.transport.requests) == 1
        sent = self.transport.requests[0]
        assert sent.method == "POST"
        assert str(sent.url) == "https://a.example.com/notify"
        assert json.loads(sent.content) == {
            "dataSource": "did:web:provider",
            "dataSink": "did:web:consumer",
            "assets": ["x"],
        }

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_change_response(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        coordinator = NegotiationCoordinator(
            self.registry, transport=RecordingTransport(refuse)
        )
        response = await coordinator.receive_negotiation(_request(Participant(id="A")))
        await coordinator.drain()
        assert response.chosen_trustee.id == "A"
        assert coordinator.pending_notifications == 0

    @pytest.mark.asyncio
    async def test_unexpected_notification_error_is_logged_and_counted(self, caplog):
        def explode(request):
            raise RuntimeError("handler bug")

        coordinator = NegotiationCoordinator(
            self.registry, transport=RecordingTransport(explode)
        )
        before = REGISTRY.get_sample_value(
            "dataspace_trust_notifications_total", {"outcome": "error"}
        ) or 0.0
        with caplog.at_level(logging.ERROR):
            response = await coordinator.receive_negotiation(_request(Participant(id="A")))
            tasks = list(coordinator._notify_tasks)
            await coordinator.drain()

        assert response.chosen_trustee.id == "A"
        assert "Unexpected error notifying" in caplog.text
        assert all(t.exception() is None for t in tasks)
        after = REGISTRY.get_sample_value(
            "dataspace_trust_notifications_total", {"outcome": "error"}
        )
        assert after == before + 1

    @pytest.mark.asyncio
    async def test_notification_error_status_is_tolerated(self):
        coordinator = NegotiationCoordinator(
            self.registry, transport=RecordingTransport(lambda r: httpx.Response(500))
        )
        response = await coordinator.receive_negotiation(_request(Participant(id="A")))
        await coordinator.drain()
        assert response.matched

    @pytest.mark.asyncio
    async def test_slow_trustee_does_not_block_response(self):
        async def slow(request):
            await asyncio.sleep(5)
            return httpx.Response(200)

        coordinator = NegotiationCoordinator(
            self.registry, notify_timeout_seconds=0.05, transport=RecordingTransport(slow)
        )
        response = await asyncio.wait_for(
            coordinator.receive_negotiation(_request(Participant(id="A"))), timeout=1.0
        )
        assert response.matched
        await asyncio.wait_for(coordinator.drain(), timeout=1.0)
        assert coordinator.pending_notifications == 0

    @pytest.mark.asyncio
    async def test_trustee_without_endpoint_is_not_notified(self):
        registry = ParticipantRegistry(["did:web:no-endpoint"])
        coordinator = NegotiationCoordinator(registry, transport=self.transport)
        response = await coordinator.receive_negotiation(_request(Participant(id="did:web:no-endpoint")))
        await coordinator.drain()
        assert response.chosen_trustee.id == "did:web:no-endpoint"
        assert self.transport.requests == []


# ---------------------------------------------------------------------------
# Initiator
# ---------------------------------------------------------------------------

class TestNegotiate:
    """Outbound negotiation requests."""

    def setup_method(self):
        self.registry = ParticipantRegistry([_trustee("A", "https://a.example.com"), "B"])

    @pytest.mark.asyncio
    async def test_sends_registry_as_candidates(self):
        transport = RecordingTransport(lambda r: httpx.Response(200, json={"chosenTrustee": {"id": "A"}}))
        coordinator = NegotiationCoordinator(
            self.registry, participant_id="did:web:me", transport=transport
        )
        result = await coordinator.negotiate(COUNTERPARTY, data_sink="did:web:them", assets=["x"])

        assert result.ok
        assert result.status_code == 200
        assert json.loads(result.payload()) == {"chosenTrustee": {"id": "A"}}

        body = json.loads(transport.requests[0].content)
        assert body["dataSource"] == "did:web:me"
        assert body["dataSink"] == "did:web:them"
        assert body["assets"] == ["x"]
        assert [c["id"] for c in body["trustedCandidates"]] == ["A", "B"]
        assert str(transport.requests[0].url) == COUNTERPARTY

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        transport = RecordingTransport(lambda r: httpx.Response(503, text="down"))
        coordinator = NegotiationCoordinator(self.registry, transport=transport)
        result = await coordinator.negotiate(COUNTERPARTY)
        assert not result.ok
        assert result.status_code == 503
        assert result.body == "down"
        assert "503" in result.error

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        coordinator = NegotiationCoordinator(self.registry, transport=RecordingTransport(refuse))
        result = await coordinator.negotiate(COUNTERPARTY)
        assert not result.ok
        assert result.error.startswith("Failed to send negotiation request")
        assert "error" in json.loads(result.payload())

    @pytest.mark.asyncio
    async def test_timeout(self):
        def time_out(request):
            raise httpx.ReadTimeout("timed out", request=request)

        coordinator = NegotiationCoordinator(self.registry, transport=RecordingTransport(time_out))
        result = await coordinator.negotiate(COUNTERPARTY)
        assert not result.ok

    @pytest.mark.asyncio
    async def test_empty_address(self):
        transport = RecordingTransport()
        coordinator = NegotiationCoordinator(self.registry, transport=transport)
        result = await coordinator.negotiate("")
        assert not result.ok
        assert result.error == "Counterparty address is required"
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_two_connectors_agree(self):
        """Initiator and responder wired back to back through the wire format."""
        responder = NegotiationCoordinator(
            ParticipantRegistry(["C", "B"]), transport=RecordingTransport()
        )

        async def answer(request):
            incoming = NegotiationRequest.model_validate(json.loads(request.content))
            response = await responder.receive_negotiation(incoming)
            return httpx.Response(200, json=response.to_wire())

        initiator = NegotiationCoordinator(self.registry, transport=RecordingTransport(answer))
        result = await initiator.negotiate(COUNTERPARTY)
        await responder.drain()

        assert result.ok
        response = NegotiationResponse.model_validate(json.loads(result.body))
        assert response.chosen_trustee.id == "B"
