"""Pydantic models for Slack webhook server CLI options.

Defines a typed configuration model used by the webhook server entrypoint.

Examples
--------
.. code-block:: python

    from slackend.webhook.cli.options import _parse_args

    opts = _parse_args(["--port", "3001", "--base-path", "/slack"])  # WebhookServerCliOptions
    assert opts.port == 3001
"""

from __future__ import annotations

import argparse

from pydantic import BaseModel, ConfigDict, Field


class WebhookServerCliOptions(BaseModel):
    """Validated CLI options for the Slack webhook server entrypoint.

    Fields
    ------
    host : str
        Host to bind (default: 0.0.0.0)
    port : int
        Port to listen on (default: 3000)
    log_level : str | None
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL); falls back to LOG_LEVEL
    log_file : str | None
        Path to log file (optional)
    log_dir : str | None
        Directory for log files (optional)
    log_format : str | None
        Log message format (optional)
    slack_token : str | None
        Slack bot token fallback (overridden by .env or environment)
    env_file : str
        Path to .env file for environment variable loading
    no_env_file : bool
        Disable loading .env file when True
    base_path : str | None
        Path to mount the gateway routes under (overrides BASE_PATH)
    """

    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)
    log_level: str | None = None
    log_file: str | None = None
    log_dir: str | None = None
    log_format: str | None = None

    slack_token: str | None = None

    env_file: str = ".env"
    no_env_file: bool = False

    base_path: str | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def deserialize(cls, ns: argparse.Namespace) -> "WebhookServerCliOptions":
        """Build a validated options object from argparse namespace."""
        data = {name: getattr(ns, name) for name in cls.model_fields.keys() if hasattr(ns, name)}
        return cls(**data)
