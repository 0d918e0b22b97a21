# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""Centralized exception hierarchy for Dataspace Trust.

All Dataspace Trust exceptions inherit from DataspaceTrustError. They are
raised inside components and at input boundaries; the public core
operations convert them into boolean or structured outcomes.
"""


class DataspaceTrustError(Exception):
    """Base exception for all Dataspace Trust errors."""


class ConfigurationError(DataspaceTrustError):
    """Invalid or unreadable service configuration."""


class ParticipantError(DataspaceTrustError):
    """A participant record could not be built from the given input."""


class ClaimError(DataspaceTrustError):
    """A credential or claim could not be parsed."""


__all__ = [
    "DataspaceTrustError",
    "ConfigurationError",
    "ParticipantError",
    "ClaimError",
]
