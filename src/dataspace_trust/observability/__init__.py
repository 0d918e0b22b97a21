# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Observability: process logging and Prometheus metrics.
"""

from .log_config import LOG_FORMAT, configure_logging
from .metrics import (
    record_evaluation,
    record_negotiation,
    record_notification,
    render_latest,
    set_registry_size,
)

__all__ = [
    "LOG_FORMAT",
    "configure_logging",
    "record_evaluation",
    "record_negotiation",
    "record_notification",
    "render_latest",
    "set_registry_size",
]
