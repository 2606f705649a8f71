"""Publish adapter for Amazon SNS topics.

The topic ARN is ``AWS_SNS_TOPIC_ARN_PREFIX + topic``, e.g.
``arn:aws:sns:us-east-1:123456789012:slack_`` + ``event_team_join``.
Envelope attributes become SNS message attributes so subscriptions can
filter on them.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, ClassVar, Dict

from slackend.model import SlackEnvelope
from slackend.settings import SettingModel
from slackend.types import BusAttributes, Topic

from .base import PublishAdapter, serialize_payload

__all__: list[str] = ["SNSPublisher", "message_attributes"]


def message_attributes(attributes: BusAttributes) -> Dict[str, Dict[str, str]]:
    """Convert envelope attributes to the SNS ``MessageAttributes`` shape, dropping empty values."""
    converted: Dict[str, Dict[str, str]] = {}
    for key, value in attributes.items():
        if isinstance(value, list):
            converted[key] = {"DataType": "String.Array", "StringValue": json.dumps(value)}
        elif value:
            converted[key] = {"DataType": "String", "StringValue": value}
    return converted


class SNSPublisher(PublishAdapter):
    """Publishes envelopes to SNS with a boto3 ``sns`` client."""

    name: ClassVar[str] = "sns"

    def __init__(self, client: Any, topic_arn_prefix: str):
        self.client = client
        self.topic_arn_prefix = topic_arn_prefix

    async def _deliver(self, envelope: SlackEnvelope, topic: Topic, settings: SettingModel) -> None:
        await asyncio.to_thread(
            self.client.publish,
            TopicArn=f"{self.topic_arn_prefix}{topic}",
            Message=serialize_payload(envelope),
            MessageAttributes=message_attributes(envelope.attributes()),
        )
