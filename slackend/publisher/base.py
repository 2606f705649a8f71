"""Publish adapter contract.

A publish adapter delivers a normalized envelope to one message bus
technology. Adapters receive their client by injection; the gateway never
builds cloud clients itself (see :mod:`slackend.publisher.loader` for the
host-side selection).

Subclasses implement :meth:`PublishAdapter._deliver` and raise on failure;
:meth:`PublishAdapter.publish` turns any raised error into a failed
:class:`~slackend.model.PublishOutcome`. Nothing here retries: retries,
backoff and dead-lettering belong to the calling transport.
"""

from __future__ import annotations

import json
import logging
from abc import ABCMeta, abstractmethod
from typing import Any, ClassVar, Final

from slackend.errors import GatewayError
from slackend.model import PublishOutcome, SlackEnvelope
from slackend.settings import SettingModel
from slackend.types import Topic

__all__: list[str] = ["PublishAdapter", "error_detail", "serialize_payload"]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


def serialize_payload(envelope: SlackEnvelope) -> str:
    """JSON document published as the message body."""
    return json.dumps(envelope.payload)


def error_detail(error: BaseException) -> Any:
    """Extract the backend's own error body from a raised exception.

    botocore ``ClientError`` carries ``response["Error"]``, Slack SDK errors a
    ``SlackResponse`` whose ``data`` is the API body. Anything else is reported
    by its message.
    """
    if isinstance(error, GatewayError):
        return error.detail
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        return response.get("Error", response)
    data = getattr(response, "data", None)
    if isinstance(data, dict):
        return data
    return str(error) or error.__class__.__name__


class PublishAdapter(metaclass=ABCMeta):
    """Delivers envelopes to a message bus and reports the outcome."""

    name: ClassVar[str] = "abstract"

    async def publish(self, envelope: SlackEnvelope, topic: Topic, settings: SettingModel) -> PublishOutcome:
        """Deliver ``envelope`` to ``topic``.

        Parameters
        ----------
        envelope : SlackEnvelope
            The normalized Slack message
        topic : Topic
            Destination computed by :func:`slackend.topic.topic_for`
        settings : SettingModel
            Gateway settings

        Returns
        -------
        PublishOutcome
            ``ok=True`` once the backend accepted the message, otherwise
            ``ok=False`` with the backend's error detail
        """
        _LOG.info(f"PUBLISH [{self.name}] {topic}")
        try:
            await self._deliver(envelope, topic, settings)
        except Exception as e:
            detail = error_detail(e)
            _LOG.warning(f"PUBLISH FAILED [{self.name}] {topic}: {detail}")
            return PublishOutcome.failure(detail)
        return PublishOutcome.success()

    @abstractmethod
    async def _deliver(self, envelope: SlackEnvelope, topic: Topic, settings: SettingModel) -> None:
        """Hand the envelope to the backend, raising on rejection."""
