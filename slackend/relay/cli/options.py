"""Command-line argument parsing for the relay worker."""

from __future__ import annotations

import argparse

from slackend.logging.config import add_logging_arguments

from .models import RelayCliOptions


def _parse_args(argv: list[str] | None = None) -> RelayCliOptions:
    """Parse CLI args and build `RelayCliOptions`."""
    parser = argparse.ArgumentParser(description="Relay queued messages to Slack's chat API")
    parser.add_argument(
        "--method",
        default=None,
        choices=["postMessage", "postEphemeral"],
        help="Chat method to relay with (default: SLACKEND_RELAY_METHOD or postMessage)",
    )
    parser.add_argument(
        "--group",
        default=None,
        help="Consumer group name for queue backends that support groups",
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

    parser = add_logging_arguments(parser)

    return RelayCliOptions.deserialize(parser.parse_args(argv))
