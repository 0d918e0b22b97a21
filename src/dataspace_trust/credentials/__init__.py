# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Verifiable credential models and claim extraction.
"""

from .extractor import ClaimExtractor
from .models import (
    ClaimSet,
    Credential,
    CredentialClaim,
    CredentialSubject,
    ResolvedClaim,
    ScalarClaim,
)

__all__ = [
    "ClaimExtractor",
    "ClaimSet",
    "Credential",
    "CredentialClaim",
    "CredentialSubject",
    "ResolvedClaim",
    "ScalarClaim",
]
