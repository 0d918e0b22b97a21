# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""Shared constants for claim keys, protocol paths and defaults."""

# Credential subject claim keys
TRUSTED_PARTICIPANTS_KEY = "trusted_participants"
PARTICIPANT_KEY = "participant"

# Policy left-operand keys
TRUSTED_PARTICIPANTS_CONSTRAINT = "trusted_participants"
TRUSTED_PARTICIPANTS_WHITELIST_CONSTRAINT = "trusted_participants_whitelist"

# HTTP surface
DEFAULT_BASE_PATH = "/trusted-participants"
NOTIFY_PATH = "/notify"
HEALTH_MESSAGE = "Web server running on Connector and ready for requests"
NO_COMMON_TRUSTEE_MESSAGE = "No commonly trusted data trustee found"

# Timeouts (seconds)
DEFAULT_NEGOTIATION_TIMEOUT_SECONDS = 10.0
DEFAULT_NOTIFY_TIMEOUT_SECONDS = 5.0

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
ENV_PREFIX = "DSTRUST_"
