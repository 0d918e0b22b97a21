# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Claim Extractor

Pulls participant identifiers out of a requester's credentials.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from dataspace_trust.constants import PARTICIPANT_KEY, TRUSTED_PARTICIPANTS_KEY

from .models import ClaimSet, Credential

logger = logging.getLogger(__name__)

Claims = Union[ClaimSet, Mapping[str, Any], None]


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)


class ClaimExtractor:
    """Stateless extraction of participant ids from credential claims.

    Args:
        trusted_participants_key: Subject claim holding a list of trusted
            participant ids.
        participant_key: Subject claim holding the requester's own id.
    """

    def __init__(
        self,
        trusted_participants_key: str = TRUSTED_PARTICIPANTS_KEY,
        participant_key: str = PARTICIPANT_KEY,
    ) -> None:
        self.trusted_participants_key = trusted_participants_key
        self.participant_key = participant_key

    def trusted_participants(self, claims: Claims) -> list[str]:
        """Union of every credential's trusted-participants list, deduplicated."""
        claim_set = ClaimSet.resolve(claims)
        found: list[str] = []
        for credential in claim_set.credentials:
            found.extend(self._trusted_from_credential(credential))
        return _dedupe(found)

    def participants(self, claims: Claims) -> list[str]:
        """The requester's participant ids asserted across its credentials."""
        claim_set = ClaimSet.resolve(claims)
        found = (self._participant_from_credential(c) for c in claim_set.credentials)
        return _dedupe(p for p in found if p is not None)

    def _trusted_from_credential(self, credential: Credential) -> list[str]:
        value = credential.claim(self.trusted_participants_key)
        logger.debug("Received %s: %s", self.trusted_participants_key, value)
        if value is None:
            return []
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            logger.warning("%s is not a list: %r", self.trusted_participants_key, value)
            return []
        trusted: list[str] = []
        for item in value:
            if isinstance(item, str):
                trusted.append(item)
            else:
                logger.warning("Trusted participant is not a string: %r", item)
        return trusted

    def _participant_from_credential(self, credential: Credential) -> Optional[str]:
        value = credential.claim(self.participant_key)
        if isinstance(value, str) and value:
            return value
        if value is not None:
            logger.warning("%s is not a string: %r", self.participant_key, value)
        return None
