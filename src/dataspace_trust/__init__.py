# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Dataspace Trust - trusted-participant policies for data-sharing connectors

Credential claims · Participant registry · Trustee negotiation

Evaluates whether a counterpart is trusted according to the claims in its
verifiable credentials, keeps a registry of trusted participants, and
negotiates a commonly trusted data trustee with a remote connector.

Version: 0.1.0
"""

__version__ = "0.1.0"

# Trusted participants
from .participants import (
    Participant,
    ParticipantRegistry,
    ParticipantSnapshot,
    compute_hash,
)

# Credentials & claims
from .credentials import (
    ClaimExtractor,
    ClaimSet,
    Credential,
    CredentialSubject,
)

# Policy constraint functions
from .policy import (
    ConstraintFunctionRegistry,
    Operator,
    ParticipantAgent,
    PolicyContext,
    TrustedParticipantsConstraintFunction,
    TrustedParticipantsWhitelistConstraintFunction,
    default_function_registry,
    evaluate_trusted_set,
)

# Negotiation
from .negotiation import (
    InitiationResult,
    NegotiationCoordinator,
    NegotiationRequest,
    NegotiationResponse,
)

# Configuration
from .config import ServiceConfig, load_config

# Exceptions
from .exceptions import (
    DataspaceTrustError,
    ConfigurationError,
    ParticipantError,
    ClaimError,
)

__all__ = [
    # Version
    "__version__",
    # Participants
    "Participant",
    "ParticipantRegistry",
    "ParticipantSnapshot",
    "compute_hash",
    # Credentials
    "ClaimExtractor",
    "ClaimSet",
    "Credential",
    "CredentialSubject",
    # Policy
    "ConstraintFunctionRegistry",
    "Operator",
    "ParticipantAgent",
    "PolicyContext",
    "TrustedParticipantsConstraintFunction",
    "TrustedParticipantsWhitelistConstraintFunction",
    "default_function_registry",
    "evaluate_trusted_set",
    # Negotiation
    "InitiationResult",
    "NegotiationCoordinator",
    "NegotiationRequest",
    "NegotiationResponse",
    # Configuration
    "ServiceConfig",
    "load_config",
    # Exceptions
    "DataspaceTrustError",
    "ConfigurationError",
    "ParticipantError",
    "ClaimError",
]
