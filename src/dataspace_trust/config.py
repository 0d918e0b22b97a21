# Copyright (c) Dataspace-Trust Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Service Configuration

Settings come from an optional YAML file, then ``DSTRUST_*`` environment
variables override individual keys:

    DSTRUST_HOST, DSTRUST_PORT, DSTRUST_BASE_PATH, DSTRUST_LOG_LEVEL,
    DSTRUST_PARTICIPANT_ID, DSTRUST_NEGOTIATION_TIMEOUT_SECONDS,
    DSTRUST_NOTIFY_TIMEOUT_SECONDS, DSTRUST_TRUSTED_PARTICIPANTS
    (comma-separated ids)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from dataspace_trust.constants import (
    DEFAULT_BASE_PATH,
    DEFAULT_HOST,
    DEFAULT_NEGOTIATION_TIMEOUT_SECONDS,
    DEFAULT_NOTIFY_TIMEOUT_SECONDS,
    DEFAULT_PORT,
    ENV_PREFIX,
)
from dataspace_trust.exceptions import ConfigurationError
from dataspace_trust.participants import Participant


class ServiceConfig(BaseModel):
    """Runtime settings for the trusted-participants service."""

    host: str = Field(default=DEFAULT_HOST, description="Bind address")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Bind port")
    base_path: str = Field(default=DEFAULT_BASE_PATH, description="Mount point of the API")
    log_level: str = Field(default="INFO", description="Root log level")
    participant_id: str = Field(default="", description="This connector's participant id")
    negotiation_timeout_seconds: float = Field(default=DEFAULT_NEGOTIATION_TIMEOUT_SECONDS, gt=0)
    notify_timeout_seconds: float = Field(default=DEFAULT_NOTIFY_TIMEOUT_SECONDS, gt=0)
    trusted_participants: list[Participant] = Field(
        default_factory=list, description="Participants trusted at startup"
    )

    @field_validator("base_path")
    @classmethod
    def _normalise_base_path(cls, value: str) -> str:
        value = value.strip()
        if not value or value == "/":
            return ""
        return "/" + value.strip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("trusted_participants", mode="before")
    @classmethod
    def _coerce_participants(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"id": v} if isinstance(v, str) else v for v in value]
        return value

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ServiceConfig":
        try:
            return cls(**dict(data))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ServiceConfig":
        """Load configuration from a YAML file."""
        return cls.from_mapping(_read_yaml(Path(path)))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServiceConfig":
        """Load configuration from ``DSTRUST_*`` environment variables only."""
        return cls.from_mapping(_env_overrides(os.environ if environ is None else environ))


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Config file {path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in ServiceConfig.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        if name == "trusted_participants":
            overrides[name] = [p.strip() for p in raw.split(",") if p.strip()]
        else:
            overrides[name] = raw
    return overrides


def load_config(
    path: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServiceConfig:
    """YAML file (if given) with environment overrides applied on top."""
    data: dict[str, Any] = _read_yaml(Path(path)) if path else {}
    data.update(_env_overrides(os.environ if environ is None else environ))
    return ServiceConfig.from_mapping(data)
