"""
Type definitions for the slackend package.

This module provides centralized type aliases used across the gateway for
static type checking with MyPy.

Type Hierarchy:
    - Slack types: Slack-specific type definitions
    - Bus types: Message bus topic and attribute definitions
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Literal, Mapping, TypeAlias, Union

if TYPE_CHECKING:
    from slack_sdk.web.async_client import AsyncWebClient

__all__ = [
    # Slack types
    "SlackPayload",
    "SlackHeaders",
    "SlackClient",
    "ChatMethod",
    "VerificationFailure",
    # Bus types
    "Topic",
    "BusAttributes",
    "QueueMessage",
]

# ============================================================================
# Slack Type Definitions
# ============================================================================

SlackPayload: TypeAlias = Dict[str, Any]
"""A decoded Slack payload (callback JSON, event body, slash command form, OAuth result)."""

SlackHeaders: TypeAlias = Mapping[str, str]
"""Inbound request headers. Lookups are expected to be case-insensitive."""

ChatMethod: TypeAlias = Literal["postMessage", "postEphemeral"]
"""Slack chat API methods the relay may invoke."""

VerificationFailure: TypeAlias = Literal["stale", "mismatch"]
"""Reasons a request signature check can fail."""

if TYPE_CHECKING:
    SlackClient: TypeAlias = AsyncWebClient
    """Type alias for Slack SDK AsyncWebClient."""
else:
    SlackClient: TypeAlias = Any

# ============================================================================
# Bus Type Definitions
# ============================================================================

Topic: TypeAlias = str
"""Destination identifier on the message bus (e.g. ``event_team_join``)."""

BusAttributes: TypeAlias = Dict[str, Union[str, List[str]]]
"""Message metadata attached to a published envelope (``type``, ``id``, ``callback_id``, ``action_ids``)."""

QueueMessage: TypeAlias = Dict[str, Any]
"""Complete queue message including metadata."""
