"""The request pipeline: verify -> normalize -> route -> publish.

Each ``handle_*`` coroutine of :class:`SlackGateway` runs the stages in
order and stops at the first failing one. Stages signal failure by raising a
:class:`~slackend.errors.GatewayError`; the pipeline converts it to an
outcome, so callers always receive one of the :data:`PipelineOutcome`
dataclasses and hand it to :class:`slackend.response.ResponseResolver`.

Routes and stages
=================
============  ============  ============================  ===============
Route         Verified      Normalizer                    Publishes
============  ============  ============================  ===============
/callbacks    yes           ``normalize_callback``        yes
/events       yes           ``normalize_event``           unless handshake
/slash/{cmd}  yes           ``normalize_slash``           yes
/oauth[/v2]   no            token exchange                yes
============  ============  ============================  ===============

Exactly one publish call is made per accepted request, and a rejected
publish is never retried here.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Final, Mapping, Optional, Union

from slack_sdk.signature import Clock

from .client import SlackClientFactory, default_factory
from .errors import ConfigurationError, GatewayError, MalformedPayloadError, OAuthError, VerificationError
from .model import OAuthEnvelope, SlackEnvelope
from .normalizer import UrlVerification, normalize_callback, normalize_event, normalize_oauth, normalize_slash
from .oauth import OAuthVersion, exchange_code, resolve_success_uri
from .publisher import PublishAdapter, load_publisher
from .settings import SettingModel, SettingsProvider
from .topic import topic_for
from .types import SlackClient, SlackHeaders, Topic
from .verification import verify_request

__all__: list[str] = [
    "Accepted",
    "Challenged",
    "OAuthCompleted",
    "OAuthDenied",
    "PublishFailed",
    "Rejected",
    "PipelineOutcome",
    "SlackGateway",
    "GatewayProvider",
]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)

TRACE_HEADER: Final[str] = "x-amzn-trace-id"


@dataclass(frozen=True, slots=True)
class Accepted:
    """The envelope was published."""

    envelope: SlackEnvelope
    topic: Topic


@dataclass(frozen=True, slots=True)
class Challenged:
    """An Events API ``url_verification`` handshake; nothing was published."""

    challenge: Any


@dataclass(frozen=True, slots=True)
class OAuthCompleted:
    """The OAuth result was published; the user goes on to ``redirect_uri``."""

    envelope: OAuthEnvelope
    topic: Topic
    redirect_uri: str


@dataclass(frozen=True, slots=True)
class OAuthDenied:
    """The user denied the installation or the token exchange failed."""

    error: OAuthError


@dataclass(frozen=True, slots=True)
class PublishFailed:
    """The publish adapter rejected the envelope."""

    envelope: SlackEnvelope
    topic: Topic
    error: Any


@dataclass(frozen=True, slots=True)
class Rejected:
    """Verification or normalization failed before anything was published."""

    error: GatewayError


PipelineOutcome = Union[Accepted, Challenged, OAuthCompleted, OAuthDenied, PublishFailed, Rejected]

Normalized = Union[SlackEnvelope, UrlVerification]


def _header(headers: SlackHeaders, name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _decode(body: Union[bytes, str]) -> str:
    if isinstance(body, str):
        return body
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedPayloadError("Request body is not valid UTF-8") from e


class SlackGateway:
    """Runs Slack requests through the pipeline for one settings snapshot.

    Parameters
    ----------
    settings : SettingModel
        Immutable gateway settings
    publisher : PublishAdapter
        Destination of every accepted envelope
    slack_client : Optional[SlackClient]
        Client used for the OAuth token exchange
    clock : Optional[Clock]
        Time source for the replay window check
    """

    def __init__(
        self,
        settings: SettingModel,
        publisher: PublishAdapter,
        slack_client: Optional[SlackClient] = None,
        clock: Optional[Clock] = None,
    ):
        self.settings = settings
        self.publisher = publisher
        self.slack_client = slack_client
        self.clock = clock

    async def handle_callback(self, body: Union[bytes, str], headers: SlackHeaders) -> PipelineOutcome:
        return await self._run(body, headers, normalize_callback)

    async def handle_event(self, body: Union[bytes, str], headers: SlackHeaders) -> PipelineOutcome:
        return await self._run(body, headers, normalize_event)

    async def handle_slash(self, body: Union[bytes, str], headers: SlackHeaders, command: str) -> PipelineOutcome:
        return await self._run(body, headers, lambda text: normalize_slash(text, command))

    async def handle_oauth(self, query: Mapping[str, str], version: OAuthVersion = None) -> PipelineOutcome:
        """Complete an OAuth installation.

        A Slack ``error`` parameter short-circuits before the token exchange.
        """
        denial = query.get("error")
        if denial:
            _LOG.error(f"OAuth denied: {denial}")
            return OAuthDenied(OAuthError("OAuth denied", detail=denial))

        code = query.get("code")
        if not code:
            return OAuthDenied(OAuthError("Missing OAuth code"))
        if self.slack_client is None:
            raise ConfigurationError("A Slack client is required for the OAuth flow")

        try:
            token_result = await exchange_code(self.slack_client, code, self.settings, version=version)
        except OAuthError as e:
            return OAuthDenied(e)

        envelope = normalize_oauth(token_result, code)
        published = await self._publish(envelope)
        if isinstance(published, Accepted):
            return OAuthCompleted(
                envelope=envelope,
                topic=published.topic,
                redirect_uri=resolve_success_uri(token_result, self.settings),
            )
        return published

    async def _run(
        self,
        body: Union[bytes, str],
        headers: SlackHeaders,
        normalize: Callable[[str], Normalized],
    ) -> PipelineOutcome:
        try:
            text = _decode(body)
            verification = verify_request(text, headers, self.settings, clock=self.clock)
            if not verification.valid:
                raise VerificationError(verification.reason or "mismatch")
            normalized = normalize(text)
        except GatewayError as e:
            _LOG.warning(f"Request rejected: {e.message}")
            return Rejected(e)

        if isinstance(normalized, UrlVerification):
            return Challenged(normalized.challenge)
        trace_header = _header(headers, TRACE_HEADER)
        if trace_header:
            normalized = replace(normalized, trace_header=trace_header)
        return await self._publish(normalized)

    async def _publish(self, envelope: SlackEnvelope) -> Union[Accepted, PublishFailed]:
        topic = topic_for(envelope, self.settings)
        _LOG.debug(f"SLACK MESSAGE {json.dumps(envelope.payload)}")
        outcome = await self.publisher.publish(envelope, topic, self.settings)
        if not outcome.ok:
            return PublishFailed(envelope=envelope, topic=topic, error=outcome.error)
        return Accepted(envelope=envelope, topic=topic)


class GatewayProvider:
    """Builds the :class:`SlackGateway` once, on first use, and reuses it.

    Settings come from a :class:`~slackend.settings.SettingsProvider`; the
    Slack client and publisher are built from them unless injected. Two
    concurrent first requests share a single build.
    """

    def __init__(
        self,
        settings_provider: SettingsProvider,
        publisher: Optional[PublishAdapter] = None,
        slack_client: Optional[SlackClient] = None,
        client_factory: SlackClientFactory = default_factory,
        clock: Optional[Clock] = None,
    ):
        self.settings_provider = settings_provider
        self._publisher = publisher
        self._slack_client = slack_client
        self._client_factory = client_factory
        self._clock = clock
        self._gateway: Optional[SlackGateway] = None
        self._lock = asyncio.Lock()

    async def get(self) -> SlackGateway:
        if self._gateway is not None:
            return self._gateway
        async with self._lock:
            if self._gateway is None:
                self._gateway = await self._build()
        return self._gateway

    async def _build(self) -> SlackGateway:
        settings = await self.settings_provider.get()
        slack_client = self._slack_client or self._client_factory.create_from_settings(settings)
        publisher = self._publisher or load_publisher(settings, slack_client=slack_client)
        return SlackGateway(settings, publisher, slack_client=slack_client, clock=self._clock)
