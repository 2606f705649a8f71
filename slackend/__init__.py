"""slackend: a Slack webhook gateway.

Receives Slack callbacks, events, slash commands and OAuth completions,
verifies and normalizes them, and publishes each one to a message bus
topic named after what happened (``event_team_join``, ``slash_fizz``...).
"""

__version__ = "0.1.0"

from .model import CallbackEnvelope, EventEnvelope, OAuthEnvelope, PublishOutcome, SlashEnvelope
from .pipeline import SlackGateway
from .settings import SettingModel, get_settings
from .topic import topic_for
from .verification import SignatureVerifier

__all__ = [
    "__version__",
    "CallbackEnvelope",
    "EventEnvelope",
    "OAuthEnvelope",
    "SlashEnvelope",
    "PublishOutcome",
    "SlackGateway",
    "SettingModel",
    "get_settings",
    "topic_for",
    "SignatureVerifier",
]
