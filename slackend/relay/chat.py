"""Batch relay of queued messages to Slack's chat API.

A batch holds one or more messages. Each one is posted with a single
``chat.postMessage`` / ``chat.postEphemeral`` call; the calls run
concurrently and a failing message never stops the others. Results come
back in input order.

Messages may be the chat arguments themselves, an EventBridge event whose
``detail`` holds them, or a gateway queue message whose ``payload`` holds them:

.. code-block:: python

    relay = ChatRelay(client)
    outcomes = await relay.relay([
        {"channel": "C1234567", "text": "Hello, world!"},
        {"detail": {"channel": "C7654321", "text": "Hi again"}},
    ])
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Final, Iterable, List, Optional, Union

from slackend.errors import MalformedPayloadError
from slackend.model import PublishOutcome
from slackend.publisher.base import error_detail
from slackend.publisher.chat import chat_method
from slackend.types import ChatMethod, QueueMessage, SlackClient

__all__: list[str] = ["ChatRelay", "message_kwargs"]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


def message_kwargs(message: QueueMessage) -> Dict[str, Any]:
    """Extract the chat API arguments from a queued message."""
    if "detail" in message:
        body = message["detail"]
    elif "payload" in message and "topic" in message:
        body = message["payload"]
    else:
        body = message

    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError as e:
            raise MalformedPayloadError(f"Invalid message JSON: {e}") from e
    if not isinstance(body, dict):
        raise MalformedPayloadError("Relay message must be a JSON object")
    return body


class ChatRelay:
    """Posts queued messages to Slack, one chat call per message."""

    def __init__(self, client: SlackClient, method: ChatMethod = "postMessage"):
        self.client = client
        self.method = method

    async def relay(
        self,
        messages: Union[QueueMessage, Iterable[QueueMessage]],
        method: Optional[ChatMethod] = None,
    ) -> List[PublishOutcome]:
        """Post every message and collect the outcomes in input order.

        Parameters
        ----------
        messages : Union[QueueMessage, Iterable[QueueMessage]]
            A single message or a batch of them
        method : Optional[ChatMethod]
            ``postMessage`` or ``postEphemeral``; defaults to the relay's method

        Returns
        -------
        List[PublishOutcome]
            One outcome per message
        """
        batch = [messages] if isinstance(messages, dict) else list(messages)
        chat_name = method or self.method
        return list(await asyncio.gather(*(self._post(chat_name, message) for message in batch)))

    async def _post(self, method: ChatMethod, message: QueueMessage) -> PublishOutcome:
        try:
            kwargs = message_kwargs(message)
            response = await chat_method(self.client, method)(**kwargs)
        except Exception as e:
            detail = error_detail(e)
            _LOG.warning(f"chat.{method} failed: {detail}")
            return PublishOutcome.failure(detail)
        _LOG.info(f"chat.{method} RESPONSE {getattr(response, 'data', response)}")
        return PublishOutcome.success()
