"""Unit tests for the settings model and the lazy settings provider."""

import asyncio
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

import slackend.settings as settings_module
from slackend.settings import (
    DEFAULT_OAUTH_SUCCESS_URI,
    PublisherBackend,
    SettingModel,
    SettingsProvider,
    get_settings,
    normalize_base_path,
    route_prefix,
)


class TestSettingModel:
    def test_defaults(self):
        settings = SettingModel(_env_file=None)
        assert settings.signing_secret is None
        assert settings.signing_version == "v0"
        assert settings.disable_verification is False
        assert settings.topic_prefix == ""
        assert settings.topic_suffix == ""
        assert settings.base_path == "/"
        assert settings.route_prefix == ""
        assert settings.publisher is PublisherBackend.QUEUE
        assert settings.relay_method == "postMessage"
        assert settings.success_uri_template == DEFAULT_OAUTH_SUCCESS_URI

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SLACK_SIGNING_SECRET", "shh")
        monkeypatch.setenv("SLACK_CLIENT_ID", "123.456")
        monkeypatch.setenv("SLACK_TOPIC_PREFIX", "slack_")
        monkeypatch.setenv("SLACKEND_PUBLISHER", "eventbridge")
        settings = SettingModel(_env_file=None)
        assert settings.secret_value("signing_secret") == "shh"
        assert settings.client_id == "123.456"
        assert settings.topic_prefix == "slack_"
        assert settings.publisher is PublisherBackend.EVENTBRIDGE

    @pytest.mark.parametrize("name", ["SLACK_TOKEN", "SLACK_BOT_TOKEN"])
    def test_token_aliases(self, monkeypatch, name):
        monkeypatch.setenv(name, "xoxb-1")
        assert SettingModel(_env_file=None).secret_value("token") == "xoxb-1"

    def test_short_topic_aliases(self, monkeypatch):
        monkeypatch.setenv("TOPIC_PREFIX", "pre_")
        monkeypatch.setenv("TOPIC_SUFFIX", "_suf")
        settings = SettingModel(_env_file=None)
        assert (settings.topic_prefix, settings.topic_suffix) == ("pre_", "_suf")

    def test_env_file_takes_priority_over_environment(self, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SLACK_CLIENT_ID=from-file\n")
        monkeypatch.setenv("SLACK_CLIENT_ID", "from-env")
        assert SettingModel(_env_file=str(env_file)).client_id == "from-file"

    @pytest.mark.parametrize("value", ["1", "true", "yes", "anything"])
    def test_disable_verification_truthy_values(self, monkeypatch, value):
        monkeypatch.setenv("SLACK_DISABLE_VERIFICATION", value)
        assert SettingModel(_env_file=None).disable_verification is True

    @pytest.mark.parametrize("value", ["", "0", "false", "False", "no", "off"])
    def test_disable_verification_falsy_values(self, monkeypatch, value):
        monkeypatch.setenv("SLACK_DISABLE_VERIFICATION", value)
        assert SettingModel(_env_file=None).disable_verification is False

    def test_settings_are_immutable(self):
        settings = SettingModel(_env_file=None)
        with pytest.raises(ValidationError):
            settings.topic_prefix = "changed"

    def test_unknown_publisher_is_rejected(self):
        with pytest.raises(ValidationError):
            SettingModel(_env_file=None, publisher="carrier-pigeon")

    def test_empty_secret_is_treated_as_unset(self):
        assert SettingModel(_env_file=None, signing_secret="").secret_value("signing_secret") is None


@pytest.mark.parametrize(
    "path, normalized, prefix",
    [
        (None, "/", ""),
        ("", "/", ""),
        ("/", "/", ""),
        ("slack", "/slack", "/slack"),
        ("/slack/", "/slack", "/slack"),
        ("/api/slack", "/api/slack", "/api/slack"),
    ],
)
def test_base_path_normalization(path, normalized, prefix):
    assert normalize_base_path(path) == normalized
    assert route_prefix(path) == prefix
    assert SettingModel(_env_file=None, base_path=path).route_prefix == prefix


class TestGetSettings:
    def test_is_memoized(self):
        first = get_settings(no_env_file=True)
        assert get_settings(no_env_file=True) is first

    def test_force_reload(self):
        first = get_settings(no_env_file=True)
        second = get_settings(no_env_file=True, force_reload=True, topic_prefix="x_")
        assert second is not first
        assert second.topic_prefix == "x_"
        assert settings_module._settings is second


class TestSettingsProvider:
    @pytest.mark.asyncio
    async def test_loads_once(self):
        provider = SettingsProvider(no_env_file=True, topic_prefix="p_")
        first = await provider.get()
        second = await provider.get()
        assert first is second
        assert first.topic_prefix == "p_"
        assert provider.fetch_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_first_callers_share_one_fetch(self, monkeypatch):
        monkeypatch.setenv("AWS_SECRET", "slack/app")
        calls = []

        def loader(name, region):
            calls.append((name, region))
            return {"SLACK_SIGNING_SECRET": "from-secret"}

        provider = SettingsProvider(no_env_file=True, secret_loader=loader)
        results = await asyncio.gather(*(provider.get() for _ in range(5)))

        assert calls == [("slack/app", None)]
        assert provider.fetch_count == 1
        assert all(result is results[0] for result in results)
        assert results[0].secret_value("signing_secret") == "from-secret"

    @pytest.mark.asyncio
    async def test_explicit_overrides_win_over_secret(self, monkeypatch):
        monkeypatch.setenv("AWS_SECRET", "slack/app")
        monkeypatch.setenv("AWS_REGION", "eu-west-1")
        loader = MagicMock(return_value={"SLACK_CLIENT_ID": "secret-id", "SLACK_CLIENT_SECRET": "s3cr3t"})

        provider = SettingsProvider(no_env_file=True, secret_loader=loader, client_id="override-id")
        settings = await provider.get()

        loader.assert_called_once_with("slack/app", "eu-west-1")
        assert settings.client_id == "override-id"
        assert settings.secret_value("client_secret") == "s3cr3t"

    @pytest.mark.asyncio
    async def test_failed_load_is_not_cached(self, monkeypatch):
        monkeypatch.setenv("AWS_SECRET", "slack/app")
        loader = MagicMock(side_effect=[RuntimeError("throttled"), {"SLACK_SIGNING_SECRET": "ok"}])
        provider = SettingsProvider(no_env_file=True, secret_loader=loader)

        with pytest.raises(RuntimeError):
            await provider.get()
        assert provider.cached is None

        settings = await provider.get()
        assert settings.secret_value("signing_secret") == "ok"
        assert provider.fetch_count == 2

    @pytest.mark.asyncio
    async def test_of_wraps_a_resolved_snapshot(self, settings):
        provider = SettingsProvider.of(settings)
        assert provider.cached is settings
        assert await provider.get() is settings
        assert provider.fetch_count == 0


def test_by_field_name_accepts_environment_names():
    values = settings_module.by_field_name(
        {"SLACK_SIGNING_SECRET": "a", "slack_bot_token": "b", "topic_prefix": "c", "UNRELATED": "d"}
    )
    assert values == {"signing_secret": "a", "token": "b", "topic_prefix": "c", "UNRELATED": "d"}
