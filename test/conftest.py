"""
Global pytest configuration.

Every test starts from a clean process state: no gateway environment
variables, no cached settings and no web server singleton.
"""

import hashlib
import hmac
from typing import Any, AsyncIterator, Dict, List, Optional

import pytest
from slack_sdk.signature import Clock

import slackend.settings as settings_module
from slackend.model import PublishOutcome, SlackEnvelope
from slackend.publisher import PublishAdapter
from slackend.settings import SettingModel
from slackend.webhook.app import web_factory

SIGNING_SECRET = "8f742231b10e8888abcd99yyyzzz85a5"
NOW = 1531420618

_GATEWAY_ENV_VARS = (
    "SLACK_CLIENT_ID",
    "SLACK_CLIENT_SECRET",
    "SLACK_TOKEN",
    "SLACK_BOT_TOKEN",
    "SLACK_SIGNING_SECRET",
    "SLACK_SIGNING_VERSION",
    "SLACK_DISABLE_VERIFICATION",
    "SLACK_OAUTH_REDIRECT_URI",
    "SLACK_REDIRECT_URI",
    "SLACK_OAUTH_SUCCESS_URI",
    "SLACK_OAUTH_ERROR_URI",
    "SLACK_OAUTH_INSTALL_URI",
    "SLACK_TOPIC_PREFIX",
    "SLACK_TOPIC_SUFFIX",
    "TOPIC_PREFIX",
    "TOPIC_SUFFIX",
    "BASE_PATH",
    "BASE_URL",
    "SLACKEND_PUBLISHER",
    "SLACKEND_RELAY_METHOD",
    "AWS_SNS_TOPIC_ARN_PREFIX",
    "AWS_EVENTBRIDGE_BUS_NAME",
    "AWS_EVENTBRIDGE_SOURCE",
    "AWS_EVENTBRIDGE_DETAIL_TYPE",
    "PUBSUB_PROJECT_ID",
    "GOOGLE_CLOUD_PROJECT",
    "AWS_REGION",
    "AWS_DEFAULT_REGION",
    "AWS_SECRET",
    "LOG_LEVEL",
    "LOG_FILE",
    "LOG_DIR",
    "LOG_FORMAT",
)


class FixedClock(Clock):
    """Clock frozen at a given epoch second."""

    def __init__(self, now: float = NOW):
        self._now = now

    def now(self) -> float:
        return self._now


class RecordingPublisher(PublishAdapter):
    """Publish adapter that records every delivery and can be told to reject."""

    name = "recording"

    def __init__(self, error: Optional[Any] = None):
        self.error = error
        self.published: List[tuple[SlackEnvelope, str]] = []
        self.attempts = 0

    async def publish(self, envelope: SlackEnvelope, topic: str, settings: SettingModel) -> PublishOutcome:
        self.attempts += 1
        if self.error is not None:
            return PublishOutcome.failure(self.error)
        return await super().publish(envelope, topic, settings)

    async def _deliver(self, envelope: SlackEnvelope, topic: str, settings: SettingModel) -> None:
        self.published.append((envelope, topic))

    @property
    def topics(self) -> List[str]:
        return [topic for _, topic in self.published]


class MockQueueBackend:
    """In-memory stand-in for an ABE message queue backend."""

    def __init__(self, messages: Optional[List[Dict[str, Any]]] = None) -> None:
        self.published: List[tuple[str, Dict[str, Any]]] = []
        self.messages: List[Dict[str, Any]] = list(messages or [])

    async def publish(self, key: str, payload: Dict[str, Any]) -> None:
        self.published.append((key, payload))

    async def consume(self, *, group: Optional[str] = None) -> AsyncIterator[Dict[str, Any]]:
        for message in self.messages:
            yield message

    @classmethod
    def from_env(cls) -> "MockQueueBackend":
        return cls()


def sign(body: str, timestamp: Any = NOW, secret: str = SIGNING_SECRET, version: str = "v0") -> Dict[str, str]:
    """Headers Slack would send with ``body``."""
    data = f"{version}:{timestamp}:{body}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), data, hashlib.sha256).hexdigest()
    return {
        "X-Slack-Request-Timestamp": str(timestamp),
        "X-Slack-Signature": f"{version}={digest}",
    }


def make_settings(**overrides: Any) -> SettingModel:
    values: Dict[str, Any] = {"signing_secret": SIGNING_SECRET}
    values.update(overrides)
    return SettingModel(_env_file=None, **values)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch):
    """Remove gateway variables from the environment and reset process-wide state."""
    for name in _GATEWAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings_module, "_settings", None)
    web_factory.reset()
    yield
    web_factory.reset()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def settings() -> SettingModel:
    return make_settings()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def queue_backend() -> MockQueueBackend:
    return MockQueueBackend()


@pytest.fixture
def sign_request():
    """The :func:`sign` helper, so test modules need not import conftest."""
    return sign


@pytest.fixture
def settings_factory():
    """Build settings with the test signing secret and the given overrides."""
    return make_settings


@pytest.fixture
def publisher_factory():
    return RecordingPublisher


@pytest.fixture
def queue_backend_factory():
    return MockQueueBackend


@pytest.fixture
def clock_factory():
    return FixedClock
