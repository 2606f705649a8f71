"""Publish adapter that relays envelopes straight back to Slack's chat API.

The envelope payload is passed as the keyword arguments of
``chat.postMessage`` or ``chat.postEphemeral``, so it must already be a
message (``channel``, ``text``, ``blocks``, ...).
"""

from __future__ import annotations

from typing import ClassVar

from slackend.model import SlackEnvelope
from slackend.settings import SettingModel
from slackend.types import ChatMethod, SlackClient, Topic

from .base import PublishAdapter

__all__: list[str] = ["ChatPublisher", "chat_method"]


def chat_method(client: SlackClient, method: ChatMethod):
    """Resolve ``postMessage`` / ``postEphemeral`` to the client's coroutine method."""
    if method == "postMessage":
        return client.chat_postMessage
    if method == "postEphemeral":
        return client.chat_postEphemeral
    raise ValueError(f"Unsupported chat method: {method}")


class ChatPublisher(PublishAdapter):
    """Posts the envelope payload as a Slack message."""

    name: ClassVar[str] = "chat"

    def __init__(self, client: SlackClient, method: ChatMethod = "postMessage"):
        self.client = client
        self.method = method

    async def _deliver(self, envelope: SlackEnvelope, topic: Topic, settings: SettingModel) -> None:
        await chat_method(self.client, self.method)(**envelope.payload)
