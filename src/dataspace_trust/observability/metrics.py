# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""Prometheus metrics for Dataspace Trust.

Metrics exposed:

* ``dataspace_trust_constraint_evaluations_total``: decisions per constraint function
* ``dataspace_trust_negotiations_total``: negotiations per role and outcome
* ``dataspace_trust_notifications_total``: trustee notifications per outcome
* ``dataspace_trust_registered_participants``: current registry size
"""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest

CONSTRAINT_EVALUATIONS = Counter(
    "dataspace_trust_constraint_evaluations_total",
    "Constraint function evaluations",
    ["function", "decision"],
)
NEGOTIATIONS = Counter(
    "dataspace_trust_negotiations_total",
    "Trustee negotiations",
    ["role", "outcome"],
)
NOTIFICATIONS = Counter(
    "dataspace_trust_notifications_total",
    "Notifications sent to chosen data trustees",
    ["outcome"],
)
REGISTERED_PARTICIPANTS = Gauge(
    "dataspace_trust_registered_participants",
    "Number of trusted participants in the registry",
)


def record_evaluation(function: str, allowed: bool) -> None:
    CONSTRAINT_EVALUATIONS.labels(function=function, decision="allow" if allowed else "deny").inc()


def record_negotiation(role: str, outcome: str) -> None:
    NEGOTIATIONS.labels(role=role, outcome=outcome).inc()


def record_notification(outcome: str) -> None:
    NOTIFICATIONS.labels(outcome=outcome).inc()


def set_registry_size(size: int) -> None:
    REGISTERED_PARTICIPANTS.set(size)


def render_latest() -> tuple[bytes, str]:
    """Current exposition payload and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST
