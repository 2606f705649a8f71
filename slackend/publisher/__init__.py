"""Publish adapters: one implementation per message bus technology."""

from .base import PublishAdapter, error_detail
from .chat import ChatPublisher
from .eventbridge import EventBridgePublisher
from .loader import load_publisher
from .pubsub import PubSubPublisher
from .queue import QueuePublisher
from .sns import SNSPublisher

__all__ = [
    "PublishAdapter",
    "error_detail",
    "ChatPublisher",
    "EventBridgePublisher",
    "PubSubPublisher",
    "QueuePublisher",
    "SNSPublisher",
    "load_publisher",
]
