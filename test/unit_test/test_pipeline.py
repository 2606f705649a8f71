"""Unit tests for the request pipeline."""

import json
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import urlencode

import pytest
from slack_sdk.errors import SlackApiError

from slackend.errors import ConfigurationError, MalformedPayloadError, VerificationError
from slackend.model import CallbackEnvelope, EventEnvelope, OAuthEnvelope, SlashEnvelope
from slackend.pipeline import (
    Accepted,
    Challenged,
    GatewayProvider,
    OAuthCompleted,
    OAuthDenied,
    PublishFailed,
    Rejected,
    SlackGateway,
)
from slackend.settings import SettingsProvider

TEAM_JOIN = json.dumps({"type": "event_callback", "event": {"type": "team_join"}})


@pytest.fixture
def gateway(settings, publisher, clock):
    return SlackGateway(settings, publisher, clock=clock)


class TestHandleEvent:
    @pytest.mark.asyncio
    async def test_publishes_once(self, gateway, publisher, sign_request):
        outcome = await gateway.handle_event(TEAM_JOIN.encode(), sign_request(TEAM_JOIN))

        assert isinstance(outcome, Accepted)
        assert outcome.topic == "event_team_join"
        assert isinstance(outcome.envelope, EventEnvelope)
        assert publisher.topics == ["event_team_join"]

    @pytest.mark.asyncio
    async def test_amazon_trace_header_travels_with_the_envelope(self, gateway, publisher, sign_request):
        headers = {**sign_request(TEAM_JOIN), "X-Amzn-Trace-Id": "Root=1-5759e988-bd862e3fe1be46a994272793"}
        outcome = await gateway.handle_event(TEAM_JOIN, headers)

        assert outcome.envelope.trace_header == "Root=1-5759e988-bd862e3fe1be46a994272793"
        envelope, _ = publisher.published[0]
        assert envelope.trace_header == "Root=1-5759e988-bd862e3fe1be46a994272793"

    @pytest.mark.asyncio
    async def test_url_verification_is_not_published(self, gateway, publisher, sign_request):
        body = json.dumps({"type": "url_verification", "challenge": "abc123"})
        outcome = await gateway.handle_event(body, sign_request(body))

        assert outcome == Challenged("abc123")
        assert publisher.attempts == 0

    @pytest.mark.asyncio
    async def test_bad_signature_is_rejected_before_parsing(self, gateway, publisher):
        outcome = await gateway.handle_event(b"not even json", {"X-Slack-Request-Timestamp": "1531420618"})

        assert isinstance(outcome, Rejected)
        assert isinstance(outcome.error, VerificationError)
        assert outcome.error.reason == "mismatch"
        assert publisher.attempts == 0

    @pytest.mark.asyncio
    async def test_stale_request(self, gateway, sign_request):
        headers = sign_request(TEAM_JOIN, timestamp=1531420618 - 301)
        outcome = await gateway.handle_event(TEAM_JOIN, headers)
        assert isinstance(outcome, Rejected)
        assert outcome.error.reason == "stale"
        assert outcome.error.message == "Request too old"

    @pytest.mark.asyncio
    async def test_malformed_body_after_verification(self, gateway, publisher, sign_request):
        outcome = await gateway.handle_event("{oops", sign_request("{oops"))
        assert isinstance(outcome, Rejected)
        assert isinstance(outcome.error, MalformedPayloadError)
        assert publisher.attempts == 0

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_malformed(self, gateway):
        outcome = await gateway.handle_event(b"\xff\xfe", {})
        assert isinstance(outcome, Rejected)
        assert isinstance(outcome.error, MalformedPayloadError)

    @pytest.mark.asyncio
    async def test_publish_failure_is_not_retried(self, settings, clock, publisher_factory, sign_request):
        publisher = publisher_factory(error={"Code": "NotFound"})
        gateway = SlackGateway(settings, publisher, clock=clock)

        outcome = await gateway.handle_event(TEAM_JOIN, sign_request(TEAM_JOIN))

        assert isinstance(outcome, PublishFailed)
        assert outcome.topic == "event_team_join"
        assert outcome.error == {"Code": "NotFound"}
        assert publisher.attempts == 1

    @pytest.mark.asyncio
    async def test_topic_affixes_are_applied(self, settings_factory, publisher, clock, sign_request):
        gateway = SlackGateway(settings_factory(topic_prefix="slack_", topic_suffix="_v1"), publisher, clock=clock)
        await gateway.handle_event(TEAM_JOIN, sign_request(TEAM_JOIN))
        assert publisher.topics == ["slack_event_team_join_v1"]


class TestHandleCallbackAndSlash:
    @pytest.mark.asyncio
    async def test_callback(self, gateway, publisher, sign_request):
        body = urlencode({"payload": json.dumps({"type": "block_actions", "actions": [{"action_id": "go"}]})})
        outcome = await gateway.handle_callback(body, sign_request(body))

        assert isinstance(outcome, Accepted)
        assert outcome.topic == "callback_block_actions"
        assert isinstance(outcome.envelope, CallbackEnvelope)
        assert outcome.envelope.action_ids == ("go",)

    @pytest.mark.asyncio
    async def test_slash(self, gateway, publisher, sign_request):
        outcome = await gateway.handle_slash("fizz=buzz", sign_request("fizz=buzz"), "fizz")

        assert isinstance(outcome, Accepted)
        assert outcome.topic == "slash_fizz"
        assert outcome.envelope == SlashEnvelope(id="fizz", payload={"fizz": "buzz"})

    @pytest.mark.asyncio
    async def test_verification_disabled(self, settings_factory, publisher):
        gateway = SlackGateway(settings_factory(disable_verification=True), publisher)
        outcome = await gateway.handle_slash("fizz=buzz", {}, "fizz")
        assert isinstance(outcome, Accepted)


@pytest.fixture
def oauth_client():
    client = MagicMock()
    client.oauth_access = AsyncMock(
        return_value=MagicMock(
            data={"ok": True, "team_id": "T1", "incoming_webhook": {"channel_id": "C1"}, "access_token": "xoxp"}
        )
    )
    return client


@pytest.fixture
def oauth_gateway(settings_factory, publisher, oauth_client):
    settings = settings_factory(client_id="1.2", client_secret="s3cr3t")
    return SlackGateway(settings, publisher, slack_client=oauth_client)


class TestHandleOAuth:
    @pytest.mark.asyncio
    async def test_completed(self, oauth_gateway, publisher):
        outcome = await oauth_gateway.handle_oauth({"code": "abc"})

        assert isinstance(outcome, OAuthCompleted)
        assert outcome.topic == "oauth"
        assert outcome.redirect_uri == "slack://channel?team=T1&id=C1"
        assert outcome.envelope == OAuthEnvelope(id="abc", payload=outcome.envelope.payload)
        assert publisher.topics == ["oauth"]

    @pytest.mark.asyncio
    async def test_user_denied(self, oauth_gateway, oauth_client, publisher):
        outcome = await oauth_gateway.handle_oauth({"error": "access_denied"})

        assert isinstance(outcome, OAuthDenied)
        assert outcome.error.detail == "access_denied"
        oauth_client.oauth_access.assert_not_awaited()
        assert publisher.attempts == 0

    @pytest.mark.asyncio
    async def test_missing_code(self, oauth_gateway):
        outcome = await oauth_gateway.handle_oauth({})
        assert isinstance(outcome, OAuthDenied)
        assert outcome.error.message == "Missing OAuth code"

    @pytest.mark.asyncio
    async def test_exchange_rejected(self, oauth_gateway, oauth_client, publisher):
        oauth_client.oauth_access.side_effect = SlackApiError("bad", {"ok": False, "error": "invalid_code"})
        outcome = await oauth_gateway.handle_oauth({"code": "abc"})
        assert isinstance(outcome, OAuthDenied)
        assert outcome.error.detail == "invalid_code"
        assert publisher.attempts == 0

    @pytest.mark.asyncio
    async def test_publish_failure(self, settings_factory, publisher_factory, oauth_client):
        publisher = publisher_factory(error="broker down")
        gateway = SlackGateway(settings_factory(client_id="1.2", client_secret="s"), publisher, slack_client=oauth_client)

        outcome = await gateway.handle_oauth({"code": "abc"})

        assert isinstance(outcome, PublishFailed)
        assert isinstance(outcome.envelope, OAuthEnvelope)
        assert outcome.error == "broker down"

    @pytest.mark.asyncio
    async def test_requires_a_slack_client(self, settings, publisher):
        with pytest.raises(ConfigurationError):
            await SlackGateway(settings, publisher).handle_oauth({"code": "abc"})


class TestGatewayProvider:
    @pytest.mark.asyncio
    async def test_builds_once(self, settings, publisher):
        factory = MagicMock()
        provider = GatewayProvider(SettingsProvider.of(settings), publisher=publisher, client_factory=factory)

        first = await provider.get()
        second = await provider.get()

        assert first is second
        assert first.settings is settings
        assert first.publisher is publisher
        assert first.slack_client is factory.create_from_settings.return_value
        factory.create_from_settings.assert_called_once_with(settings)

    @pytest.mark.asyncio
    async def test_builds_publisher_from_settings(self, settings, queue_backend, monkeypatch):
        monkeypatch.setattr("slackend.publisher.queue.load_backend", lambda: queue_backend)
        provider = GatewayProvider(SettingsProvider.of(settings), slack_client=MagicMock())

        gateway = await provider.get()

        assert gateway.publisher.backend is queue_backend

    @pytest.mark.asyncio
    async def test_configuration_error_propagates(self, settings_factory):
        provider = GatewayProvider(SettingsProvider.of(settings_factory(publisher="sns")), slack_client=MagicMock())
        with pytest.raises(ConfigurationError):
            await provider.get()
