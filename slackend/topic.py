"""Deterministic topic naming.

.. code-block:: python

    topic_for(EventEnvelope(id="team_join"), settings)  # "event_team_join"
    topic_for(SlashEnvelope(id="fizz"), settings)       # "slash_fizz"
"""

from __future__ import annotations

from typing import assert_never

from .model import CallbackEnvelope, EventEnvelope, OAuthEnvelope, SlackEnvelope, SlashEnvelope
from .settings import SettingModel
from .types import Topic

__all__: list[str] = ["topic_for"]


def topic_for(envelope: SlackEnvelope, settings: SettingModel) -> Topic:
    """Return ``topic_prefix + <kind topic> + topic_suffix`` for the envelope."""
    match envelope:
        case OAuthEnvelope():
            topic = "oauth"
        case CallbackEnvelope(id=discriminator):
            topic = f"callback_{discriminator}"
        case EventEnvelope(id=discriminator):
            topic = f"event_{discriminator}"
        case SlashEnvelope(id=discriminator):
            topic = f"slash_{discriminator}"
        case _:
            assert_never(envelope)
    return f"{settings.topic_prefix}{topic}{settings.topic_suffix}"
