"""Publish adapter for Amazon EventBridge.

Every envelope becomes one ``PutEvents`` entry whose ``Detail`` is the Slack
payload. ``DetailType`` is ``Slack Event`` unless ``AWS_EVENTBRIDGE_DETAIL_TYPE``
says otherwise. The inbound request's ``X-Amzn-Trace-Id`` is forwarded as the
entry's ``TraceHeader`` so X-Ray traces continue across the bus.
"""

from __future__ import annotations

import asyncio
from typing import Any, ClassVar, Dict, Final

from slackend.errors import PublishError
from slackend.model import SlackEnvelope
from slackend.settings import SettingModel
from slackend.types import Topic

from .base import PublishAdapter, serialize_payload

__all__: list[str] = ["DEFAULT_DETAIL_TYPE", "EventBridgePublisher"]

DEFAULT_DETAIL_TYPE: Final[str] = "Slack Event"


class EventBridgePublisher(PublishAdapter):
    """Puts envelopes on an event bus with a boto3 ``events`` client."""

    name: ClassVar[str] = "eventbridge"

    def __init__(
        self,
        client: Any,
        bus_name: str = "default",
        source: str = "com.slack",
        detail_type: str = DEFAULT_DETAIL_TYPE,
    ):
        self.client = client
        self.bus_name = bus_name
        self.source = source
        self.detail_type = detail_type

    def entry(self, envelope: SlackEnvelope, topic: Topic) -> Dict[str, str]:
        entry = {
            "Detail": serialize_payload(envelope),
            "DetailType": self.detail_type,
            "EventBusName": self.bus_name,
            "Source": self.source,
        }
        if envelope.trace_header:
            entry["TraceHeader"] = envelope.trace_header
        return entry

    async def _deliver(self, envelope: SlackEnvelope, topic: Topic, settings: SettingModel) -> None:
        response = await asyncio.to_thread(self.client.put_events, Entries=[self.entry(envelope, topic)])
        if response.get("FailedEntryCount"):
            raise PublishError(response.get("Entries", []), topic=topic)
