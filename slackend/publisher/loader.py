"""Host-side selection of the publish adapter.

The backend is chosen once, when the gateway is built, from
``SLACKEND_PUBLISHER`` (``queue``, ``sns``, ``eventbridge``, ``pubsub`` or
``chat``). Cloud clients are constructed here and injected into the adapter.

.. code-block:: bash

    SLACKEND_PUBLISHER=eventbridge AWS_EVENTBRIDGE_BUS_NAME=slack python -m slackend.webhook
"""

from __future__ import annotations

import logging
from typing import Any, Final, Optional

from slackend.client import default_factory
from slackend.errors import ConfigurationError
from slackend.settings import PublisherBackend, SettingModel
from slackend.types import SlackClient

from .base import PublishAdapter
from .chat import ChatPublisher
from .eventbridge import EventBridgePublisher
from .pubsub import PubSubPublisher
from .queue import QueuePublisher
from .sns import SNSPublisher

__all__: list[str] = ["load_publisher"]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


def _boto3_client(service: str, settings: SettingModel) -> Any:
    import boto3

    if settings.aws_region:
        return boto3.client(service, region_name=settings.aws_region)
    return boto3.client(service)


def load_publisher(
    settings: SettingModel,
    *,
    slack_client: Optional[SlackClient] = None,
    client: Optional[Any] = None,
) -> PublishAdapter:
    """Build the publish adapter selected by ``settings.publisher``.

    Parameters
    ----------
    settings : SettingModel
        Gateway settings
    slack_client : Optional[SlackClient]
        Slack client reused by the chat adapter
    client : Optional[Any]
        Pre-built backend client (queue backend, boto3 client or Pub/Sub
        publisher); built from settings when omitted

    Raises
    ------
    ConfigurationError
        If the selected backend is missing required settings
    """
    _LOG.info(f"Initializing {settings.publisher.value} publisher")
    match settings.publisher:
        case PublisherBackend.QUEUE:
            return QueuePublisher(client) if client is not None else QueuePublisher.from_env()
        case PublisherBackend.SNS:
            if not settings.sns_topic_arn_prefix:
                raise ConfigurationError("AWS_SNS_TOPIC_ARN_PREFIX is required for the sns publisher")
            return SNSPublisher(client or _boto3_client("sns", settings), settings.sns_topic_arn_prefix)
        case PublisherBackend.EVENTBRIDGE:
            return EventBridgePublisher(
                client or _boto3_client("events", settings),
                bus_name=settings.eventbridge_bus_name,
                source=settings.eventbridge_source,
                detail_type=settings.eventbridge_detail_type,
            )
        case PublisherBackend.PUBSUB:
            if not settings.pubsub_project_id:
                raise ConfigurationError("PUBSUB_PROJECT_ID is required for the pubsub publisher")
            if client is None:
                from google.cloud import pubsub_v1

                client = pubsub_v1.PublisherClient()
            return PubSubPublisher(client, settings.pubsub_project_id)
        case PublisherBackend.CHAT:
            return ChatPublisher(
                slack_client or default_factory.create_from_settings(settings), method=settings.relay_method
            )
        case _:
            raise ConfigurationError(f"Unknown publisher backend: {settings.publisher}")
