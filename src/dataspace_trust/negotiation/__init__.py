# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Trustee negotiation between two connectors.
"""

from .coordinator import NegotiationCoordinator, notify_url
from .models import (
    DataTrusteeNotification,
    InitiationResult,
    NegotiationRequest,
    NegotiationResponse,
)

__all__ = [
    "DataTrusteeNotification",
    "InitiationResult",
    "NegotiationCoordinator",
    "NegotiationRequest",
    "NegotiationResponse",
    "notify_url",
]
