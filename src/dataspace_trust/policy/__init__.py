# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Policy constraint functions for trusted participants.
"""

from .constraints import (
    ConstraintFunction,
    TrustedParticipantsConstraintFunction,
    TrustedParticipantsWhitelistConstraintFunction,
    evaluate_trusted_set,
    parse_flag,
)
from .context import Operator, ParticipantAgent, PolicyContext
from .functions import ConstraintFunctionRegistry, default_function_registry

__all__ = [
    "ConstraintFunction",
    "ConstraintFunctionRegistry",
    "Operator",
    "ParticipantAgent",
    "PolicyContext",
    "TrustedParticipantsConstraintFunction",
    "TrustedParticipantsWhitelistConstraintFunction",
    "default_function_registry",
    "evaluate_trusted_set",
    "parse_flag",
]
