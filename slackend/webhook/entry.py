"""Command-line entry point of the Slack webhook gateway.

Starts a uvicorn server hosting the app built by
:func:`slackend.webhook.server.create_slack_app`. Settings are resolved
lazily, on the first request, so a secret fetched from AWS Secrets Manager
(``AWS_SECRET``) is read once per process rather than at import time.

Quick Start Examples
====================

.. code-block:: bash

    # Run with the defaults (0.0.0.0:3000, routes at /)
    python -m slackend.webhook

    # Mount the routes under /slack and load a custom .env file
    python -m slackend.webhook --port 8080 --base-path /slack --env-file /etc/slackend/.env

    # Debug logging to logs/slackend.log as well as the console
    python -m slackend.webhook --log-level DEBUG --log-file slackend.log

.. code-block:: python

    import asyncio
    from slackend.webhook.entry import run_slack_server

    asyncio.run(run_slack_server(host="127.0.0.1", port=3000, base_path="/slack"))

Environment Variables
=====================
- **SLACK_SIGNING_SECRET**: verifies inbound requests (required unless ``SLACK_DISABLE_VERIFICATION`` is set)
- **SLACK_CLIENT_ID** / **SLACK_CLIENT_SECRET**: OAuth token exchange
- **SLACKEND_PUBLISHER**: ``queue`` (default), ``sns``, ``eventbridge``, ``pubsub`` or ``chat``
- **SLACK_TOPIC_PREFIX** / **SLACK_TOPIC_SUFFIX**: wrap every topic name
- **BASE_PATH**: mount path of the routes (default ``/``)
- **AWS_SECRET**: name of a JSON secret merged into the settings on first use
"""

from __future__ import annotations

import asyncio
import logging
import os
import pathlib
from typing import Final, Optional

from dotenv import load_dotenv

from slackend.logging.config import setup_logging_from_args
from slackend.settings import SettingsProvider

from .cli.options import _parse_args
from .server import create_slack_app

__all__: list[str] = [
    "run_slack_server",
    "main",
]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


async def run_slack_server(
    host: str = "0.0.0.0",
    port: int = 3000,
    base_path: Optional[str] = None,
    env_file: Optional[str] = ".env",
    no_env_file: bool = False,
) -> None:
    """Run the Slack webhook gateway until the server is stopped.

    Parameters
    ----------
    host : str, optional
        The host interface to listen on. Default is "0.0.0.0" (all interfaces).
    port : int, optional
        The port number to listen on. Default is 3000.
    base_path : Optional[str], optional
        Mount path of the routes. Falls back to ``BASE_PATH`` and then ``/``.
    env_file : Optional[str], optional
        The .env file the settings read, by default ".env"
    no_env_file : bool, optional
        Skip the .env file entirely, by default False
    """
    if base_path is None:
        base_path = os.environ.get("BASE_PATH")

    provider = SettingsProvider(env_file=env_file, no_env_file=no_env_file)
    app = create_slack_app(settings_provider=provider, base_path=base_path)

    _LOG.info(f"Starting Slack webhook gateway on {host}:{port}")

    import uvicorn

    config = uvicorn.Config(app=app, host=host, port=port)
    server = uvicorn.Server(config=config)
    await server.serve()


def main(argv: Optional[list[str]] = None) -> None:
    """Run the Slack webhook gateway as a standalone application.

    Parameters
    ----------
    argv : Optional[list[str]], optional
        Command-line arguments to parse. If None, uses sys.argv.

    Notes
    -----
    The Slack bot token may come from ``--slack-token``, the ``SLACK_TOKEN``
    environment variable or the .env file; the .env file wins.
    """
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
        run_slack_server(
            host=args.host,
            port=args.port,
            base_path=args.base_path,
            env_file=args.env_file,
            no_env_file=args.no_env_file,
        )
    )


if __name__ == "__main__":
    main()
