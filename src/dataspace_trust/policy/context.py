# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Policy evaluation context.

The host policy engine supplies operator, right operand, rule and a context.
These types are the slice of that context the constraint functions read.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class Operator(str, Enum):
    """ODRL comparison operators."""

    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    GEQ = "GEQ"
    LT = "LT"
    LEQ = "LEQ"
    IN = "IN"
    HAS_PART = "HAS_PART"
    IS_A = "IS_A"
    IS_ALL_OF = "IS_ALL_OF"
    IS_ANY_OF = "IS_ANY_OF"
    IS_NONE_OF = "IS_NONE_OF"

    @classmethod
    def parse(cls, value: Any) -> Optional["Operator"]:
        """Parse ``"EQ"``, ``"eq"``, ``"odrl:eq"``, a full ODRL IRI such as
        ``"http://www.w3.org/ns/odrl/2/eq"``, or an Operator.

        Returns None for anything unrecognised.
        """
        if isinstance(value, Operator):
            return value
        if not isinstance(value, str):
            return None
        # keep the local name after any prefix, path or fragment
        name = re.split(r"[:/#]", value.strip())[-1]
        aliases = {"hasPart": "HAS_PART", "isA": "IS_A", "isAllOf": "IS_ALL_OF",
                   "isAnyOf": "IS_ANY_OF", "isNoneOf": "IS_NONE_OF"}
        name = aliases.get(name, name).upper()
        try:
            return cls(name)
        except ValueError:
            return None


class ParticipantAgent(BaseModel):
    """The requesting party as seen by the policy engine.

    Attributes:
        claims: Mapping from credential id to credential (or any value)
            resolved by the host's identity layer.
        attributes: Free-form attributes such as the agent identity.
    """

    claims: dict[str, Any] = Field(default_factory=dict)
    attributes: dict[str, str] = Field(default_factory=dict)


class PolicyContext(BaseModel):
    """Context data for one policy evaluation."""

    participant_agent: ParticipantAgent = Field(default_factory=ParticipantAgent)
    problems: list[str] = Field(default_factory=list)

    def report_problem(self, problem: str) -> None:
        """Record a problem encountered while evaluating."""
        self.problems.append(problem)

    @property
    def has_problems(self) -> bool:
        return bool(self.problems)
