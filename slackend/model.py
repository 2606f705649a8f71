"""Canonical data model of the gateway.

Every inbound Slack payload is normalized into one of four frozen envelope
dataclasses. Downstream components (topic routing, publishing, response
resolution) only ever see :data:`SlackEnvelope`, so they need no per-route
branching beyond an exhaustive ``match``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Tuple, Union

from .types import BusAttributes, SlackPayload, VerificationFailure

__all__: list[str] = [
    "EnvelopeKind",
    "OAuthEnvelope",
    "CallbackEnvelope",
    "EventEnvelope",
    "SlashEnvelope",
    "SlackEnvelope",
    "PublishOutcome",
    "VerificationResult",
]


class EnvelopeKind(str, Enum):
    """Kinds of Slack message the gateway accepts."""

    OAUTH = "oauth"
    CALLBACK = "callback"
    EVENT = "event"
    SLASH = "slash"


@dataclass(frozen=True, slots=True, kw_only=True)
class _Envelope:
    """
    Fields shared by every envelope.

    :param id: stable discriminator used for topic derivation and logging
    :param payload: the decoded Slack payload
    :param trace_header: ``X-Amzn-Trace-Id`` of the inbound request, when present
    """

    kind: ClassVar[EnvelopeKind]

    id: str
    payload: SlackPayload = field(default_factory=dict)
    trace_header: Optional[str] = None

    def attributes(self) -> BusAttributes:
        """Message metadata for backends that support it."""
        return {"type": self.kind.value, "id": self.id}


@dataclass(frozen=True, slots=True, kw_only=True)
class OAuthEnvelope(_Envelope):
    """Result of a completed OAuth token exchange. ``id`` is the OAuth code."""

    kind: ClassVar[EnvelopeKind] = EnvelopeKind.OAUTH


@dataclass(frozen=True, slots=True, kw_only=True)
class CallbackEnvelope(_Envelope):
    """
    An interactive callback (block actions, view submissions, legacy actions).

    :param callback_id: the view or legacy callback id, when the payload has one
    :param action_ids: ``action_id`` of every action in a ``block_actions`` payload
    """

    kind: ClassVar[EnvelopeKind] = EnvelopeKind.CALLBACK

    callback_id: Optional[str] = None
    action_ids: Optional[Tuple[str, ...]] = None

    def attributes(self) -> BusAttributes:
        attrs = _Envelope.attributes(self)
        if self.callback_id is not None:
            attrs["callback_id"] = self.callback_id
        if self.action_ids is not None:
            attrs["action_ids"] = list(self.action_ids)
        return attrs


@dataclass(frozen=True, slots=True, kw_only=True)
class EventEnvelope(_Envelope):
    """An Events API callback. ``id`` is the inner ``event.type``."""

    kind: ClassVar[EnvelopeKind] = EnvelopeKind.EVENT


@dataclass(frozen=True, slots=True, kw_only=True)
class SlashEnvelope(_Envelope):
    """A slash command. ``id`` is the command name taken from the route."""

    kind: ClassVar[EnvelopeKind] = EnvelopeKind.SLASH


SlackEnvelope = Union[OAuthEnvelope, CallbackEnvelope, EventEnvelope, SlashEnvelope]


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    """Result of one publish adapter invocation."""

    ok: bool
    error: Any = None

    @classmethod
    def success(cls) -> "PublishOutcome":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: Any) -> "PublishOutcome":
        return cls(ok=False, error=error)


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Result of a request signature check."""

    valid: bool
    reason: Optional[VerificationFailure] = None
