# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Credential and claim models.

A requester's claims arrive as a loose mapping from credential id to
either a verifiable credential or some arbitrary value. ``ClaimSet``
resolves that mapping once, up front, into a closed set of variants so
downstream code never has to type-test raw values.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, model_validator

from dataspace_trust.exceptions import ClaimError

logger = logging.getLogger(__name__)


class CredentialSubject(BaseModel):
    """Subject of a verifiable credential and the claims made about it.

    Claims may be given explicitly under ``claims`` or, as in W3C JSON,
    as sibling keys of ``id``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    claims: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_claims(cls, data: Any) -> Any:
        if isinstance(data, dict) and "claims" not in data:
            return {
                "id": data.get("id"),
                "claims": {k: v for k, v in data.items() if k != "id"},
            }
        return data


class Credential(BaseModel):
    """A verifiable credential as handed over by the host's identity layer.

    Signature and issuer checks happen before the credential reaches this
    package; only the subject's claims are read here.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    context: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("context", "@context")
    )
    type: list[str] = Field(default_factory=lambda: ["VerifiableCredential"])
    issuer: Optional[str] = None
    issuance_date: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("issuance_date", "issuanceDate")
    )
    credential_subject: CredentialSubject = Field(
        ..., validation_alias=AliasChoices("credential_subject", "credentialSubject")
    )

    @model_validator(mode="before")
    @classmethod
    def _listify(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            for key in ("type", "context", "@context"):
                if isinstance(data.get(key), str):
                    data[key] = [data[key]]
        return data

    def claim(self, key: str, default: Any = None) -> Any:
        """Value of a subject claim, or *default*."""
        return self.credential_subject.claims.get(key, default)

    @classmethod
    def parse(cls, value: Any) -> "Credential":
        """Parse a credential from a model instance or mapping.

        Raises:
            ClaimError: If *value* is not a well-formed credential.
        """
        if isinstance(value, Credential):
            return value
        try:
            return cls.model_validate(value)
        except ValidationError as e:
            raise ClaimError(f"Malformed credential: {e.errors()[0]['msg']}") from e


class CredentialClaim(BaseModel):
    """A claim entry that holds a parsed credential."""

    kind: Literal["credential"] = "credential"
    key: str
    credential: Credential


class ScalarClaim(BaseModel):
    """A claim entry that is not credential-shaped."""

    kind: Literal["scalar"] = "scalar"
    key: str
    value: Any = None


ResolvedClaim = Union[CredentialClaim, ScalarClaim]


def _is_credential_shaped(value: Any) -> bool:
    if isinstance(value, Credential):
        return True
    return isinstance(value, Mapping) and (
        "credentialSubject" in value or "credential_subject" in value
    )


class ClaimSet(BaseModel):
    """Claims of one requester, resolved into tagged variants."""

    entries: list[ResolvedClaim] = Field(default_factory=list)

    @classmethod
    def resolve(cls, claims: Union["ClaimSet", Mapping[str, Any], None]) -> "ClaimSet":
        """Resolve a raw claims mapping.

        Credential-shaped values that fail to parse are logged and skipped;
        they contribute nothing to the set.
        """
        if isinstance(claims, ClaimSet):
            return claims
        entries: list[ResolvedClaim] = []
        for key, value in (claims or {}).items():
            if not _is_credential_shaped(value):
                entries.append(ScalarClaim(key=str(key), value=value))
                continue
            try:
                credential = Credential.parse(value)
            except ClaimError as e:
                logger.warning("Skipping claim %s: %s", key, e)
                continue
            entries.append(CredentialClaim(key=str(key), credential=credential))
        return cls(entries=entries)

    @property
    def credentials(self) -> list[Credential]:
        """Credentials in the set, in claim order."""
        return [e.credential for e in self.entries if isinstance(e, CredentialClaim)]

    def __len__(self) -> int:
        return len(self.entries)
