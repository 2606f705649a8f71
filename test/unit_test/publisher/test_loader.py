"""Unit tests for publish adapter selection."""

from unittest.mock import MagicMock, patch

import pytest

from slackend.errors import ConfigurationError
from slackend.publisher import ChatPublisher, EventBridgePublisher, PubSubPublisher, QueuePublisher, SNSPublisher
from slackend.publisher.loader import load_publisher


class TestLoadPublisher:
    def test_queue_with_injected_backend(self, settings, queue_backend):
        publisher = load_publisher(settings, client=queue_backend)
        assert isinstance(publisher, QueuePublisher)
        assert publisher.backend is queue_backend

    def test_queue_from_env(self, settings, queue_backend):
        with patch("slackend.publisher.queue.load_backend", return_value=queue_backend) as loader:
            publisher = load_publisher(settings)
        loader.assert_called_once_with()
        assert publisher.backend is queue_backend

    def test_sns_requires_arn_prefix(self, settings_factory):
        with pytest.raises(ConfigurationError, match="AWS_SNS_TOPIC_ARN_PREFIX"):
            load_publisher(settings_factory(publisher="sns"), client=MagicMock())

    def test_sns_builds_boto3_client(self, settings_factory):
        settings = settings_factory(publisher="sns", sns_topic_arn_prefix="arn:aws:sns:eu-west-1:1:", aws_region="eu-west-1")
        with patch("boto3.client") as boto_client:
            publisher = load_publisher(settings)
        boto_client.assert_called_once_with("sns", region_name="eu-west-1")
        assert isinstance(publisher, SNSPublisher)
        assert publisher.client is boto_client.return_value
        assert publisher.topic_arn_prefix == "arn:aws:sns:eu-west-1:1:"

    def test_eventbridge(self, settings_factory):
        settings = settings_factory(
            publisher="eventbridge",
            eventbridge_bus_name="slack",
            eventbridge_source="acme.slack",
            eventbridge_detail_type="slack-event",
        )
        with patch("boto3.client") as boto_client:
            publisher = load_publisher(settings)
        boto_client.assert_called_once_with("events")
        assert isinstance(publisher, EventBridgePublisher)
        assert (publisher.bus_name, publisher.source, publisher.detail_type) == ("slack", "acme.slack", "slack-event")

    def test_pubsub_requires_project(self, settings_factory):
        with pytest.raises(ConfigurationError, match="PUBSUB_PROJECT_ID"):
            load_publisher(settings_factory(publisher="pubsub"), client=MagicMock())

    def test_pubsub_with_injected_client(self, settings_factory):
        client = MagicMock()
        publisher = load_publisher(settings_factory(publisher="pubsub", pubsub_project_id="acme"), client=client)
        assert isinstance(publisher, PubSubPublisher)
        assert publisher.client is client
        assert publisher.project_id == "acme"

    def test_chat_reuses_the_slack_client(self, settings_factory):
        slack_client = MagicMock()
        publisher = load_publisher(settings_factory(publisher="chat", relay_method="postEphemeral"), slack_client=slack_client)
        assert isinstance(publisher, ChatPublisher)
        assert publisher.client is slack_client
        assert publisher.method == "postEphemeral"
