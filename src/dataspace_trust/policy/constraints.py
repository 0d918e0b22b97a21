# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Trusted Participants Constraint Functions

Atomic constraint functions a policy engine calls with
``(operator, right_value, rule, context)``. Both deny by default:
malformed input or an unsupported operator evaluates to False and is
logged, never raised.

Two policy idioms are supported:

* ``TrustedParticipantsConstraintFunction`` compares the trusted set the
  requester's own credentials declare against ids listed in the policy.
* ``TrustedParticipantsWhitelistConstraintFunction`` compares the
  requester's participant ids against the local registry, gated on a
  boolean policy flag.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from typing import Any, Optional, Protocol

from dataspace_trust.credentials import ClaimExtractor
from dataspace_trust.observability import record_evaluation
from dataspace_trust.participants import ParticipantRegistry

from .context import Operator, PolicyContext

logger = logging.getLogger(__name__)


class ConstraintFunction(Protocol):
    """Signature of an atomic constraint function."""

    def evaluate(
        self,
        operator: Any,
        right_value: Any,
        rule: Any,
        context: PolicyContext,
    ) -> bool: ...


def _as_id_set(right_operand: Any) -> Optional[set[str]]:
    """Right operand as a set of ids, or None if it is not a collection of strings."""
    if isinstance(right_operand, (str, bytes)) or not isinstance(right_operand, Collection):
        return None
    if isinstance(right_operand, dict):
        return None
    if not all(isinstance(item, str) for item in right_operand):
        return None
    return set(right_operand)


def _compare(operator: Any, expected: set[str], trusted: set[str]) -> bool:
    op = Operator.parse(operator)
    if op is Operator.EQ:
        return trusted.issuperset(expected)
    if op is Operator.NEQ:
        return not trusted.issuperset(expected)
    if op is Operator.IN:
        return not trusted.isdisjoint(expected)
    logger.warning("Unsupported operator for trusted participants constraint: %s", operator)
    return False


def evaluate_trusted_set(operator: Any, right_operand: Any, trusted_set: Collection[str]) -> bool:
    """Compare a trusted set against the ids named by a policy.

    ``EQ`` holds when every id in *right_operand* is trusted, i.e. the
    trusted set is a superset of the operand. ``NEQ`` is its negation and
    ``IN`` holds when at least one operand id is trusted. Every other
    operator, and any operand that is not a collection of strings,
    evaluates to False.
    """
    expected = _as_id_set(right_operand)
    if expected is None:
        logger.warning("Right operand is not a collection of identifiers: %r", right_operand)
        return False
    return _compare(operator, expected, set(trusted_set))


def parse_flag(value: Any) -> bool:
    """True only for ``True`` or a string equal to ``"true"`` ignoring case."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.lower() == "true"


class TrustedParticipantsConstraintFunction:
    """Evaluates policy-listed ids against the requester's declared trusted set.

    The trusted set is the union of the ``trusted_participants`` claims of
    every credential the requester presented.
    """

    name = "trusted_participants"

    def __init__(self, extractor: Optional[ClaimExtractor] = None) -> None:
        self.extractor = extractor or ClaimExtractor()

    def evaluate(
        self,
        operator: Any,
        right_value: Any,
        rule: Any,
        context: PolicyContext,
    ) -> bool:
        allowed = self._decide(operator, right_value, context)
        record_evaluation(self.name, allowed)
        return allowed

    def _decide(self, operator: Any, right_value: Any, context: PolicyContext) -> bool:
        expected = _as_id_set(right_value)
        if expected is None:
            logger.warning("Right operand is not a collection of identifiers: %r", right_value)
            context.report_problem("Right operand must be a list of participant identifiers")
            return False
        trusted = self.extractor.trusted_participants(context.participant_agent.claims)
        logger.info("Trusted participants from claims: %s", trusted)
        return _compare(operator, expected, set(trusted))


class TrustedParticipantsWhitelistConstraintFunction:
    """Evaluates the requester's participant ids against the local registry.

    The right operand is a flag; when it is not true the constraint fails.
    ``EQ`` requires the requester's ids to equal the registry exactly,
    ``NEQ`` negates that and ``IN`` requires any requester id to be
    registered.

    Args:
        registry: The registry shared with the rest of the service.
        extractor: Claim extractor, defaults to the standard claim keys.
    """

    name = "trusted_participants_whitelist"

    def __init__(
        self,
        registry: ParticipantRegistry,
        extractor: Optional[ClaimExtractor] = None,
    ) -> None:
        self.registry = registry
        self.extractor = extractor or ClaimExtractor()

    def evaluate(
        self,
        operator: Any,
        right_value: Any,
        rule: Any,
        context: PolicyContext,
    ) -> bool:
        allowed = self._decide(operator, right_value, context)
        record_evaluation(self.name, allowed)
        return allowed

    def _decide(self, operator: Any, right_value: Any, context: PolicyContext) -> bool:
        if not parse_flag(right_value):
            logger.warning("Whitelist constraint flag is not true: %r", right_value)
            context.report_problem("Right operand must be the boolean flag 'true'")
            return False

        participants = set(self.extractor.participants(context.participant_agent.claims))
        if not participants:
            logger.warning("No participant claim found in presented credentials")
            return False

        registered = self.registry.ids()
        op = Operator.parse(operator)
        if op is Operator.EQ:
            return registered == participants
        if op is Operator.NEQ:
            return registered != participants
        if op is Operator.IN:
            return not participants.isdisjoint(registered)
        logger.warning("Unsupported operator for whitelist constraint: %s", operator)
        return False
