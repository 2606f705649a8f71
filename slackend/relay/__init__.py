"""Inbound relay: messages queued for Slack are posted through the chat API.

Contains the batch fan-out :class:`ChatRelay`, the queue-driven
:class:`RelayConsumer` and the worker CLI (``python -m slackend.relay``).
"""

from .chat import ChatRelay, message_kwargs
from .consumer import RelayConsumer

__all__ = ["ChatRelay", "RelayConsumer", "message_kwargs"]
