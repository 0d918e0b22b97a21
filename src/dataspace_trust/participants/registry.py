# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Participant Registry

The set of participants this connector trusts. Owned by the service's
composition root and handed by reference to the constraint functions and
the negotiation coordinator.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Union

from .model import Participant, ParticipantSnapshot, compute_hash

logger = logging.getLogger(__name__)

ParticipantLike = Union[Participant, str]


class ParticipantRegistry:
    """Thread-safe, insertion-ordered registry of trusted participants.

    Participants are identified by ``id``; adding a record whose id is
    already present is a no-op. Every operation holds the same lock, so
    concurrent callers always observe a consistent view.

    Args:
        participants: Optional initial members, added in order.

    Example:
        >>> registry = ParticipantRegistry()
        >>> registry.add(Participant(id="did:web:trustee"))
        True
        >>> registry.add("did:web:trustee")
        False
    """

    def __init__(self, participants: Iterable[ParticipantLike] = ()) -> None:
        self._participants: dict[str, Participant] = {}
        self._lock = threading.Lock()
        self.extend(participants)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, participant: ParticipantLike) -> bool:
        """Add a participant. Returns False if an equal entry already exists."""
        participant = Participant.coerce(participant)
        with self._lock:
            if participant.id in self._participants:
                return False
            self._participants[participant.id] = participant
        logger.info("Added trusted participant %s", participant.id)
        return True

    def extend(self, participants: Iterable[ParticipantLike]) -> int:
        """Add several participants, returning how many were new."""
        return sum(1 for p in participants if self.add(p))

    def remove(self, participant: ParticipantLike) -> bool:
        """Remove a participant. Returns False if it was not present."""
        participant = Participant.coerce(participant)
        with self._lock:
            removed = self._participants.pop(participant.id, None)
        if removed is None:
            return False
        logger.info("Removed trusted participant %s", participant.id)
        return True

    def clear(self) -> None:
        """Remove every participant."""
        with self._lock:
            count = len(self._participants)
            self._participants.clear()
        logger.debug("Cleared %d participants from registry", count)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def contains(self, participant: ParticipantLike) -> bool:
        """Whether an equal participant is registered."""
        participant = Participant.coerce(participant)
        with self._lock:
            return participant.id in self._participants

    def list(self) -> list[Participant]:
        """Copy of the current members in insertion order."""
        with self._lock:
            return list(self._participants.values())

    def ids(self) -> set[str]:
        """Identifiers of the current members."""
        with self._lock:
            return set(self._participants)

    def snapshot(self) -> ParticipantSnapshot:
        """Members and their list hash, taken atomically."""
        with self._lock:
            participants = list(self._participants.values())
        return ParticipantSnapshot(participants=participants, hash=compute_hash(participants))

    def __contains__(self, participant: object) -> bool:
        if not isinstance(participant, (Participant, str)):
            return False
        return self.contains(participant)

    def __len__(self) -> int:
        with self._lock:
            return len(self._participants)

    def __iter__(self):
        return iter(self.list())
