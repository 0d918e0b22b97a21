# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Trusted Participants HTTP API

FastAPI application exposing the registry, the negotiation endpoints and a
constraint evaluation hook. ``create_app`` is the composition root: it owns
the single registry instance and hands it to every component.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

import httpx
from fastapi import APIRouter, Body, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import AliasChoices, BaseModel, Field

from dataspace_trust.config import ServiceConfig
from dataspace_trust.constants import HEALTH_MESSAGE
from dataspace_trust.exceptions import ParticipantError
from dataspace_trust.negotiation import NegotiationCoordinator, NegotiationRequest
from dataspace_trust.observability import render_latest, set_registry_size
from dataspace_trust.participants import Participant, ParticipantRegistry
from dataspace_trust.policy import (
    ConstraintFunctionRegistry,
    ParticipantAgent,
    PolicyContext,
    default_function_registry,
)

logger = logging.getLogger(__name__)


class EvaluationRequest(BaseModel):
    """A single atomic constraint to evaluate for a requester."""

    left_operand: str = Field(..., validation_alias=AliasChoices("leftOperand", "left_operand"))
    operator: str
    right_operand: Any = Field(
        default=None, validation_alias=AliasChoices("rightOperand", "right_operand")
    )
    claims: dict[str, Any] = Field(default_factory=dict)


def _participant_from_body(payload: Any) -> Participant:
    try:
        return Participant.coerce(payload)
    except ParticipantError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _build_router(
    registry: ParticipantRegistry,
    coordinator: NegotiationCoordinator,
    functions: ConstraintFunctionRegistry,
) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def check_health():
        logger.info("Received a health request")
        return {"response": HEALTH_MESSAGE}

    @router.post("/add")
    async def add_participant(payload: Any = Body(...)):
        participant = _participant_from_body(payload)
        logger.info("Adding trusted participant: %s", participant.name)
        added = registry.add(participant)
        set_registry_size(len(registry))
        if added:
            return {"response": "Participant added successfully"}
        return {"response": "Participant already exists"}

    @router.get("/list")
    async def list_participants():
        logger.info("Retrieving trusted participants")
        return [p.model_dump(mode="json") for p in registry.list()]

    @router.get("/snapshot")
    async def snapshot():
        return registry.snapshot().model_dump(mode="json")

    @router.delete("/remove")
    async def remove_participant(payload: Any = Body(...)):
        participant = _participant_from_body(payload)
        logger.info("Removing trusted participant: %s", participant.name)
        removed = registry.remove(participant)
        set_registry_size(len(registry))
        if removed:
            return {"response": "Participant removed successfully"}
        return {"response": "Participant not found"}

    @router.post("/negotiate")
    async def initiate_negotiation(
        counterparty: str = Query(..., alias="id"),
        data_sink: Optional[str] = Query(None, alias="dataSink"),
        assets: Optional[list[str]] = Query(None, alias="asset"),
    ):
        result = await coordinator.negotiate(counterparty, data_sink=data_sink, assets=assets or [])
        return Response(content=result.payload(), media_type="application/json")

    @router.post("/receive-negotiation")
    async def receive_negotiation(negotiation_request: NegotiationRequest):
        response = await coordinator.receive_negotiation(negotiation_request)
        return JSONResponse(content=response.to_wire())

    @router.post("/notify", status_code=202)
    async def receive_notification(request: Request):
        body = await request.body()
        logger.info("Received notification: %s", body.decode("utf-8", errors="replace"))
        return Response(status_code=202)

    @router.post("/evaluate")
    async def evaluate_constraint(evaluation: EvaluationRequest):
        context = PolicyContext(participant_agent=ParticipantAgent(claims=evaluation.claims))
        allowed = functions.evaluate(
            evaluation.left_operand, evaluation.operator, evaluation.right_operand, None, context
        )
        return {"allowed": allowed, "problems": context.problems}

    return router


def create_app(
    config: Optional[ServiceConfig] = None,
    registry: Optional[ParticipantRegistry] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the application and wire its components.

    Args:
        config: Service settings; defaults are used when omitted.
        registry: Registry to serve. A new one seeded from
            ``config.trusted_participants`` is created when omitted.
        transport: Optional httpx transport for outbound negotiation calls.
    """
    config = config or ServiceConfig()
    if registry is None:
        registry = ParticipantRegistry(config.trusted_participants)
    coordinator = NegotiationCoordinator(
        registry,
        participant_id=config.participant_id,
        timeout_seconds=config.negotiation_timeout_seconds,
        notify_timeout_seconds=config.notify_timeout_seconds,
        transport=transport,
    )
    functions = default_function_registry(registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        set_registry_size(len(registry))
        logger.info(
            "Serving %d trusted participants at %s", len(registry), config.base_path or "/"
        )
        yield
        await coordinator.drain()

    app = FastAPI(title="Dataspace Trust", lifespan=lifespan)
    app.state.config = config
    app.state.registry = registry
    app.state.coordinator = coordinator
    app.state.functions = functions

    app.include_router(_build_router(registry, coordinator, functions), prefix=config.base_path)

    @app.get("/metrics")
    async def metrics():
        content, media_type = render_latest()
        return Response(content=content, media_type=media_type)

    return app
