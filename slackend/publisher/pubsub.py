"""Publish adapter for Google Cloud Pub/Sub.

Uses a ``google.cloud.pubsub_v1.PublisherClient``; the Pub/Sub topic id is
the gateway topic. Attributes must be strings, so ``action_ids`` is sent
comma-separated.
"""

from __future__ import annotations

import asyncio
from typing import Any, ClassVar, Dict

from slackend.model import SlackEnvelope
from slackend.settings import SettingModel
from slackend.types import BusAttributes, Topic

from .base import PublishAdapter, serialize_payload

__all__: list[str] = ["PubSubPublisher", "string_attributes"]


def string_attributes(attributes: BusAttributes) -> Dict[str, str]:
    return {key: ",".join(value) if isinstance(value, list) else value for key, value in attributes.items()}


class PubSubPublisher(PublishAdapter):
    """Publishes envelopes to Pub/Sub topics of one project."""

    name: ClassVar[str] = "pubsub"

    def __init__(self, client: Any, project_id: str):
        self.client = client
        self.project_id = project_id

    async def _deliver(self, envelope: SlackEnvelope, topic: Topic, settings: SettingModel) -> None:
        topic_path = self.client.topic_path(self.project_id, topic)
        data = serialize_payload(envelope).encode("utf-8")
        future = self.client.publish(topic_path, data, **string_attributes(envelope.attributes()))
        await asyncio.to_thread(future.result)
