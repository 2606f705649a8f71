"""Pydantic models for the relay worker CLI options."""

from __future__ import annotations

import argparse
from typing import Literal

from pydantic import BaseModel, ConfigDict


class RelayCliOptions(BaseModel):
    """Validated CLI options for the relay worker entrypoint.

    Fields
    ------
    method : Literal["postMessage", "postEphemeral"] | None
        Chat method to relay with (default: SLACKEND_RELAY_METHOD or postMessage)
    group : str | None
        Consumer group name for backends that support groups
    slack_token : str | None
        Slack bot token fallback
    env_file : str
        Path to .env file for environment variable loading
    no_env_file : bool
        Disable loading .env file when True
    """

    method: Literal["postMessage", "postEphemeral"] | None = None
    group: str | None = None
    log_level: str | None = None
    log_file: str | None = None
    log_dir: str | None = None
    log_format: str | None = None

    slack_token: str | None = None

    env_file: str = ".env"
    no_env_file: bool = False

    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def deserialize(cls, ns: argparse.Namespace) -> "RelayCliOptions":
        """Build a validated options object from argparse namespace."""
        data = {name: getattr(ns, name) for name in cls.model_fields.keys() if hasattr(ns, name)}
        return cls(**data)
