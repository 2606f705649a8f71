"""Normalization of raw Slack payloads into :data:`slackend.model.SlackEnvelope`.

Each parser is a stateless function of the raw request body, so the exact
bytes used for signature verification are never altered before that check.

- Callbacks arrive as ``application/x-www-form-urlencoded`` with a single
  ``payload`` field holding JSON.
- Events arrive as JSON; ``url_verification`` handshakes never become an
  envelope and are returned as :class:`UrlVerification` instead.
- Slash commands arrive as form-encoded pairs; the command name comes from
  the route, not the body.
- OAuth results come from the token exchange in :mod:`slackend.oauth`.

Unparseable bodies raise :class:`slackend.errors.MalformedPayloadError`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Union
from urllib.parse import parse_qs

from .errors import MalformedPayloadError
from .model import CallbackEnvelope, EventEnvelope, OAuthEnvelope, SlashEnvelope
from .types import SlackPayload

__all__: list[str] = [
    "UrlVerification",
    "normalize_oauth",
    "normalize_callback",
    "normalize_event",
    "normalize_slash",
    "parse_form",
]


@dataclass(frozen=True, slots=True)
class UrlVerification:
    """An Events API handshake that must be answered with its challenge."""

    challenge: Any


def parse_form(body: str) -> Dict[str, Union[str, List[str]]]:
    """Decode a form-encoded body, keeping blank values and collecting repeated keys into lists."""
    try:
        parsed = parse_qs(body, keep_blank_values=True, strict_parsing=False)
    except ValueError as e:
        raise MalformedPayloadError(f"Invalid form body: {e}") from e
    return {key: values[0] if len(values) == 1 else values for key, values in parsed.items()}


def _load_json(text: str, what: str) -> SlackPayload:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(f"Invalid {what} JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedPayloadError(f"Invalid {what} JSON: expected an object")
    return data


def normalize_oauth(token_result: SlackPayload, code: str) -> OAuthEnvelope:
    """Wrap the result of a successful token exchange."""
    return OAuthEnvelope(id=code, payload=token_result)


def normalize_callback(body: str) -> CallbackEnvelope:
    """Parse an interactive callback body.

    The discriminator is ``payload.type``. View submissions carry their
    ``view.callback_id``, block actions their ``action_id`` list and every
    other type its top-level ``callback_id``. Legacy payloads without a
    ``type`` are discriminated by their ``callback_id``.
    """
    form = parse_form(body)
    raw = form.get("payload")
    if not isinstance(raw, str):
        raise MalformedPayloadError("Callback body has no payload field")
    payload = _load_json(raw, "callback payload")

    callback_type = payload.get("type")
    if callback_type == "view_submission":
        view = payload.get("view")
        view_callback_id = view.get("callback_id") if isinstance(view, dict) else None
        return CallbackEnvelope(id=callback_type, payload=payload, callback_id=view_callback_id)
    if callback_type == "block_actions":
        actions = payload.get("actions") or []
        if not isinstance(actions, list):
            raise MalformedPayloadError("Callback payload actions must be a list")
        action_ids = tuple(
            str(action["action_id"]) for action in actions if isinstance(action, dict) and action.get("action_id")
        )
        return CallbackEnvelope(id=callback_type, payload=payload, action_ids=action_ids)

    callback_id = payload.get("callback_id")
    discriminator = callback_type or callback_id
    if not discriminator:
        raise MalformedPayloadError("Callback payload has neither type nor callback_id")
    return CallbackEnvelope(id=str(discriminator), payload=payload, callback_id=callback_id)


def normalize_event(body: str) -> Union[EventEnvelope, UrlVerification]:
    """Parse an Events API body, short-circuiting ``url_verification`` handshakes."""
    payload = _load_json(body, "event")
    if payload.get("type") == "url_verification":
        return UrlVerification(challenge=payload.get("challenge"))

    event = payload.get("event")
    event_type = event.get("type") if isinstance(event, dict) else None
    if not event_type:
        raise MalformedPayloadError("Event payload has no event.type")
    return EventEnvelope(id=str(event_type), payload=payload)


def normalize_slash(body: str, command: str) -> SlashEnvelope:
    """Parse a slash command body; ``command`` is the route's command segment."""
    return SlashEnvelope(id=command, payload=parse_form(body))
