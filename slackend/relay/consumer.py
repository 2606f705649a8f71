"""Queue consumer that feeds the chat relay.

Reads messages from an ABE message queue backend (memory, Redis or Kafka,
chosen by ``QUEUE_BACKEND``) and posts each one to Slack through
:class:`~slackend.relay.chat.ChatRelay`.

.. code-block:: python

    from abe.backends.message_queue.loader import load_backend

    consumer = RelayConsumer(load_backend(), ChatRelay(client))
    await consumer.run()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Final, Optional

from abe.backends.message_queue.base.protocol import MessageQueueBackend
from abe.backends.message_queue.consumer import AsyncLoopConsumer

from .chat import ChatRelay

__all__ = ["RelayConsumer"]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


class RelayConsumer(AsyncLoopConsumer):
    """Consume queued chat messages and relay them to Slack."""

    def __init__(self, backend: MessageQueueBackend, relay: ChatRelay, group: Optional[str] = None):
        super().__init__(backend=backend, group=group)
        self.relay = relay
        self._stop = asyncio.Event()
        self.relayed = 0
        self.failed = 0

    async def run(self, handler: Optional[Callable[[Dict[str, Any]], Awaitable[None]]] = None) -> None:
        """Relay messages until the queue is exhausted or :meth:`shutdown` is called.

        Parameters
        ----------
        handler : Optional[Callable[[Dict[str, Any]], Awaitable[None]]]
            Replaces the default relay call when given
        """
        _LOG.info("Starting relay consumer")
        process = handler or self._relay_message
        try:
            async for message in self.backend.consume(group=self.group):
                try:
                    await process(message)
                except Exception as e:
                    self.failed += 1
                    _LOG.exception(f"Error relaying message: {e}")

                if self._stop.is_set():
                    _LOG.info("Received stop signal, shutting down")
                    break
        except asyncio.CancelledError:
            _LOG.info("Relay consumer task was cancelled")
        finally:
            _LOG.info(f"Relay consumer stopped: relayed={self.relayed} failed={self.failed}")

    async def shutdown(self) -> None:
        """Signal the consumer to stop after the current message."""
        _LOG.info("Shutting down relay consumer")
        self._stop.set()

    async def _relay_message(self, message: Dict[str, Any]) -> None:
        (outcome,) = await self.relay.relay(message)
        if outcome.ok:
            self.relayed += 1
        else:
            self.failed += 1
