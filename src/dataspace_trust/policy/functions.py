# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Constraint Function Registry

Binds policy left-operand keys to atomic constraint functions, the way a
policy engine resolves a constraint like
``{"leftOperand": "trusted_participants", "operator": "IN", ...}``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from dataspace_trust.constants import (
    TRUSTED_PARTICIPANTS_CONSTRAINT,
    TRUSTED_PARTICIPANTS_WHITELIST_CONSTRAINT,
)
from dataspace_trust.participants import ParticipantRegistry

from .constraints import (
    ConstraintFunction,
    TrustedParticipantsConstraintFunction,
    TrustedParticipantsWhitelistConstraintFunction,
)
from .context import PolicyContext

logger = logging.getLogger(__name__)


class ConstraintFunctionRegistry:
    """Lookup table from left-operand key to constraint function."""

    def __init__(self) -> None:
        self._functions: dict[str, ConstraintFunction] = {}

    def register(self, key: str, function: ConstraintFunction) -> None:
        """Bind *function* to *key*, replacing any previous binding."""
        self._functions[key] = function
        logger.debug("Registered constraint function for %s", key)

    def get(self, key: str) -> Optional[ConstraintFunction]:
        return self._functions.get(key)

    def keys(self) -> list[str]:
        return sorted(self._functions)

    def evaluate(
        self,
        key: str,
        operator: Any,
        right_value: Any,
        rule: Any = None,
        context: Optional[PolicyContext] = None,
    ) -> bool:
        """Evaluate the function bound to *key*; unbound keys deny."""
        context = context or PolicyContext()
        function = self._functions.get(key)
        if function is None:
            logger.warning("No constraint function bound to %s", key)
            context.report_problem(f"Unknown constraint: {key}")
            return False
        return function.evaluate(operator, right_value, rule, context)


def default_function_registry(registry: ParticipantRegistry) -> ConstraintFunctionRegistry:
    """Function registry with both trusted-participants constraints bound."""
    functions = ConstraintFunctionRegistry()
    functions.register(TRUSTED_PARTICIPANTS_CONSTRAINT, TrustedParticipantsConstraintFunction())
    functions.register(
        TRUSTED_PARTICIPANTS_WHITELIST_CONSTRAINT,
        TrustedParticipantsWhitelistConstraintFunction(registry),
    )
    return functions
