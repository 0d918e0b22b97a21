# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Participant Model

Identity record for a trusted participant. Equality and hashing use the
stable ``id`` only, so renaming a participant or moving its endpoint does
not create a second registry entry.
"""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any, Iterable, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from dataspace_trust.exceptions import ParticipantError


class Participant(BaseModel):
    """A participant in a data-sharing interaction.

    Attributes:
        id: Stable identifier, usually a DID such as ``did:web:provider``.
        name: Display label. Defaults to the id when omitted.
        endpoint: Base URL used for negotiation callbacks. The JSON key
            ``url`` is accepted on input.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    endpoint: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("endpoint", "url")
    )

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("participant id must not be blank")
        return value

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("name") and isinstance(data.get("id"), str):
            data = {**data, "name": data["id"].strip()}
        return data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Participant):
            return self.id == other.id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.id

    @property
    def has_endpoint(self) -> bool:
        """Whether the endpoint is an absolute http(s) URL."""
        return bool(self.endpoint) and self.endpoint.startswith(("http://", "https://"))

    def canonical(self) -> str:
        """Stable one-line JSON form used for list hashing."""
        return json.dumps([self.id, self.name, self.endpoint])

    @classmethod
    def coerce(cls, value: Any) -> "Participant":
        """Build a participant from a record, a mapping or a bare id string.

        Raises:
            ParticipantError: If *value* cannot be turned into a participant.
        """
        if isinstance(value, Participant):
            return value
        if isinstance(value, str):
            ident = value.strip()
            if not ident:
                raise ParticipantError("participant id must not be blank")
            return cls(id=ident, name=ident)
        if isinstance(value, dict):
            try:
                return cls.model_validate(value)
            except ValidationError as e:
                raise ParticipantError(f"Invalid participant: {e.errors()[0]['msg']}") from e
        raise ParticipantError(
            f"Expected a participant object or identifier string, got {type(value).__name__}"
        )


class ParticipantSnapshot(BaseModel):
    """Registry contents at one instant together with their hash."""

    participants: list[Participant] = Field(default_factory=list)
    hash: str


def compute_hash(participants: Iterable[Participant]) -> str:
    """SHA-256 over the canonical form of each participant, base64-encoded.

    Order matters: the same members listed in a different order hash
    differently.
    """
    digest = hashlib.sha256()
    for participant in participants:
        digest.update(participant.canonical().encode("utf-8") + b"\n")
    return base64.b64encode(digest.digest()).decode("ascii")
