"""Command-line entry point of the relay worker.

The worker consumes messages queued for Slack from the ABE message queue
backend selected by ``QUEUE_BACKEND`` and posts each of them through
``chat.postMessage`` (or ``chat.postEphemeral``).

.. code-block:: bash

    QUEUE_BACKEND=redis REDIS_URL=redis://localhost:6379/0 \\
        python -m slackend.relay --method postEphemeral --group relay
"""

from __future__ import annotations

import asyncio
import logging
import os
import pathlib
from typing import Final, Optional

from abe.backends.message_queue.loader import load_backend
from dotenv import load_dotenv

from slackend.client import default_factory
from slackend.logging.config import setup_logging_from_args
from slackend.settings import get_settings
from slackend.types import ChatMethod

from .chat import ChatRelay
from .cli.options import _parse_args
from .consumer import RelayConsumer

__all__: list[str] = ["run_relay", "main"]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


async def run_relay(
    method: Optional[ChatMethod] = None,
    group: Optional[str] = None,
    env_file: Optional[str] = ".env",
    no_env_file: bool = False,
) -> RelayConsumer:
    """Relay queued messages until the queue is exhausted or the task is cancelled.

    Parameters
    ----------
    method : Optional[ChatMethod], optional
        Chat method; defaults to ``SLACKEND_RELAY_METHOD``
    group : Optional[str], optional
        Consumer group for backends that support groups
    env_file : Optional[str], optional
        The .env file the settings read, by default ".env"
    no_env_file : bool, optional
        Skip the .env file entirely, by default False

    Returns
    -------
    RelayConsumer
        The consumer, whose ``relayed`` and ``failed`` counters describe the run
    """
    settings = get_settings(env_file=env_file, no_env_file=no_env_file)
    relay = ChatRelay(default_factory.create_from_settings(settings), method=method or settings.relay_method)
    consumer = RelayConsumer(load_backend(), relay, group=group)

    _LOG.info(f"Relaying queued messages with chat.{relay.method}")
    await consumer.run()
    return consumer


def main(argv: Optional[list[str]] = None) -> None:
    """Run the relay worker as a standalone application."""
    args = _parse_args(argv)

    setup_logging_from_args(args)

    if args.slack_token:
        os.environ["SLACK_TOKEN"] = args.slack_token
        _LOG.info("Using Slack token from command line argument (fallback)")

    if not args.no_env_file:
        env_path = pathlib.Path(args.env_file)
        if env_path.exists():
            _LOG.info(f"Loading environment variables from {env_path.resolve()}")
            load_dotenv(dotenv_path=env_path, override=True)
        else:
            _LOG.warning(f"Environment file not found: {env_path.resolve()}")

    asyncio.run(
        run_relay(
            method=args.method,
            group=args.group,
            env_file=args.env_file,
            no_env_file=args.no_env_file,
        )
    )


if __name__ == "__main__":
    main()
