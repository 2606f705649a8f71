"""Publish adapter backed by an ABE message queue backend.

The backend (memory, Redis or Kafka) is chosen by ``QUEUE_BACKEND`` through
``abe.backends.message_queue.loader.load_backend``. Each message is keyed by
its topic and carries the envelope metadata next to the payload:

.. code-block:: python

    {
        "topic": "event_team_join",
        "attributes": {"type": "event", "id": "team_join"},
        "payload": {"type": "event_callback", "event": {"type": "team_join"}},
    }
"""

from __future__ import annotations

from typing import ClassVar

from abe.backends.message_queue.base.protocol import MessageQueueBackend
from abe.backends.message_queue.loader import load_backend

from slackend.model import SlackEnvelope
from slackend.settings import SettingModel
from slackend.types import QueueMessage, Topic

from .base import PublishAdapter

__all__: list[str] = ["QueuePublisher", "queue_message"]


def queue_message(envelope: SlackEnvelope, topic: Topic) -> QueueMessage:
    return {"topic": topic, "attributes": envelope.attributes(), "payload": envelope.payload}


class QueuePublisher(PublishAdapter):
    """Publishes envelopes to a message queue topic."""

    name: ClassVar[str] = "queue"

    def __init__(self, backend: MessageQueueBackend):
        self.backend = backend

    @classmethod
    def from_env(cls) -> "QueuePublisher":
        """Build the publisher on the backend selected by ``QUEUE_BACKEND``."""
        return cls(load_backend())

    async def _deliver(self, envelope: SlackEnvelope, topic: Topic, settings: SettingModel) -> None:
        await self.backend.publish(topic, queue_message(envelope, topic))
