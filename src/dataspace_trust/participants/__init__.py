# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Trusted participants: the identity record and the shared registry.
"""

from .model import Participant, ParticipantSnapshot, compute_hash
from .registry import ParticipantLike, ParticipantRegistry

__all__ = [
    "Participant",
    "ParticipantLike",
    "ParticipantRegistry",
    "ParticipantSnapshot",
    "compute_hash",
]
