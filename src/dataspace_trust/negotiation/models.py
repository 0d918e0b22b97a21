# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Negotiation wire models.

JSON uses camelCase keys (``dataSource``, ``trustedCandidates`` ...);
Python code uses the snake_case field names.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dataspace_trust.constants import NO_COMMON_TRUSTEE_MESSAGE
from dataspace_trust.exceptions import ParticipantError
from dataspace_trust.participants import Participant


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class NegotiationRequest(_WireModel):
    """Sent by the initiator: who exchanges which assets, and whom it trusts."""

    data_source: str = ""
    data_sink: str = ""
    assets: list[str] = Field(default_factory=list)
    trusted_candidates: list[Participant] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "trustedCandidates", "trustedDataTrustees", "trusted_candidates"
        ),
    )

    @field_validator("trusted_candidates", mode="before")
    @classmethod
    def _coerce_candidates(cls, value: Any) -> Any:
        # bare identifier strings are accepted alongside full records
        if not isinstance(value, list):
            return value
        try:
            return [Participant.coerce(v) if isinstance(v, str) else v for v in value]
        except ParticipantError as e:
            raise ValueError(str(e)) from e


class NegotiationResponse(_WireModel):
    """Returned by the responder.

    ``chosen_trustee`` is None when the two parties share no trusted
    participant; ``message`` then explains why.
    """

    data_source: str = ""
    data_sink: str = ""
    chosen_trustee: Optional[Participant] = None
    assets: list[str] = Field(default_factory=list)
    message: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.chosen_trustee is not None

    @classmethod
    def chosen(cls, request: NegotiationRequest, trustee: Participant) -> "NegotiationResponse":
        return cls(
            data_source=request.data_source,
            data_sink=request.data_sink,
            chosen_trustee=trustee,
            assets=list(request.assets),
        )

    @classmethod
    def no_common_trustee(cls, request: NegotiationRequest) -> "NegotiationResponse":
        return cls(
            data_source=request.data_source,
            data_sink=request.data_sink,
            assets=list(request.assets),
            message=NO_COMMON_TRUSTEE_MESSAGE,
        )


class DataTrusteeNotification(_WireModel):
    """Posted to the chosen trustee's ``/notify`` endpoint."""

    data_source: str = ""
    data_sink: str = ""
    assets: list[str] = Field(default_factory=list)

    @classmethod
    def for_request(cls, request: NegotiationRequest) -> "DataTrusteeNotification":
        return cls(
            data_source=request.data_source,
            data_sink=request.data_sink,
            assets=list(request.assets),
        )


class InitiationResult(BaseModel):
    """Outcome of an outbound negotiation.

    Attributes:
        ok: Whether the counterparty answered with a 2xx status.
        counterparty: Address the request was sent to.
        status_code: HTTP status, when a response was received.
        body: Raw response body, when a response was received.
        error: Description of the failure when ``ok`` is False.
    """

    ok: bool
    counterparty: str
    status_code: Optional[int] = None
    body: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, counterparty: str, status_code: int, body: str) -> "InitiationResult":
        return cls(ok=True, counterparty=counterparty, status_code=status_code, body=body)

    @classmethod
    def failure(
        cls,
        counterparty: str,
        error: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> "InitiationResult":
        return cls(
            ok=False,
            counterparty=counterparty,
            status_code=status_code,
            body=body,
            error=error,
        )

    def payload(self) -> str:
        """Counterparty body on success, ``{"error": ...}`` JSON otherwise."""
        if self.ok:
            return self.body or ""
        return json.dumps({"error": self.error})
