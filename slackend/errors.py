"""Exception taxonomy of the gateway.

Every failure raised inside the request pipeline derives from
:class:`GatewayError` and is scoped to a single request. The pipeline turns
these into outcomes that :mod:`slackend.response` maps to HTTP responses.
"""

from __future__ import annotations

from typing import Any, Optional

from .types import VerificationFailure

__all__: list[str] = [
    "GatewayError",
    "VerificationError",
    "MalformedPayloadError",
    "OAuthError",
    "PublishError",
    "ConfigurationError",
]


class GatewayError(Exception):
    """Base class for request-scoped gateway failures."""

    status_code: int = 400

    def __init__(self, message: str, *, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.detail = detail if detail is not None else message


class VerificationError(GatewayError):
    """The request failed the Slack signature check."""

    status_code = 403

    _MESSAGES = {
        "stale": "Request too old",
        "mismatch": "Signatures do not match",
    }

    def __init__(self, reason: VerificationFailure):
        super().__init__(self._MESSAGES[reason])
        self.reason = reason


class MalformedPayloadError(GatewayError):
    """The request body could not be parsed into a Slack payload."""

    status_code = 400


class OAuthError(GatewayError):
    """Slack denied the installation or the token exchange was rejected."""

    status_code = 403


class PublishError(GatewayError):
    """The publish adapter rejected the envelope."""

    status_code = 400

    def __init__(self, detail: Any, *, topic: Optional[str] = None):
        super().__init__(f"Failed to publish to {topic or 'topic'}", detail=detail)
        self.topic = topic


class ConfigurationError(ValueError):
    """The host configuration cannot build a working gateway."""
