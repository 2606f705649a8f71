"""Command-line argument parsing for the Slack webhook server."""

from __future__ import annotations

import argparse

from slackend.logging.config import add_logging_arguments

from .models import WebhookServerCliOptions


def _parse_args(argv: list[str] | None = None) -> WebhookServerCliOptions:
    """Parse CLI args and build `WebhookServerCliOptions`.

    Parameters
    ----------
    argv : list[str] | None, optional
        Argument list to parse. If None, uses sys.argv.

    Returns
    -------
    WebhookServerCliOptions
        Validated immutable options for starting the webhook server.
    """
    parser = argparse.ArgumentParser(description="Run the Slack webhook gateway")
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to listen on (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port to listen on (default: 3000)",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env in current directory)",
    )
    parser.add_argument(
        "--no-env-file",
        action="store_true",
        help="Disable loading from .env file",
    )
    parser.add_argument(
        "--slack-token",
        default=None,
        help="Slack bot token (fallback if not set in .env file or SLACK_TOKEN environment variable)",
    )
    parser.add_argument(
        "--base-path",
        default=None,
        help="Path to mount the gateway routes under (default: BASE_PATH or /)",
    )

    # Add centralized logging arguments
    parser = add_logging_arguments(parser)

    return WebhookServerCliOptions.deserialize(parser.parse_args(argv))
