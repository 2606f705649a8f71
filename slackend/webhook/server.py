"""Slack webhook gateway implementation (FastAPI).

This module defines the FastAPI application that receives Slack callbacks,
runs them through :class:`slackend.pipeline.SlackGateway` and answers with
the response chosen by :class:`slackend.response.ResponseResolver`.

Routes
======
- ``GET  /health``: liveness probe, always ``{"ok": true}``
- ``GET  /install``: redirect to ``SLACK_OAUTH_INSTALL_URI``
- ``GET  /oauth`` and ``/oauth/v2``: OAuth completion (classic / v2 flow)
- ``POST /callbacks``: interactive callbacks
- ``POST /events``: Events API
- ``POST /slash/{cmd}``: slash commands

All routes are mounted under ``BASE_PATH`` (default ``/``). The POST routes
require ``X-Slack-Request-Timestamp`` and ``X-Slack-Signature``.

Quick Examples
==============

.. code-block:: bash

    # URL verification
    curl -X POST http://localhost:3000/events \
         -H "Content-Type: application/json" \
         -H "X-Slack-Request-Timestamp: 1700000000" \
         -H "X-Slack-Signature: v0=..." \
         -d '{"type": "url_verification", "challenge": "abc123"}'

    # Health check
    curl http://localhost:3000/health
"""

from __future__ import annotations

import logging
from typing import Final, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from slack_sdk.signature import Clock

from slackend.errors import ConfigurationError
from slackend.pipeline import GatewayProvider, SlackGateway
from slackend.publisher import PublishAdapter
from slackend.response import ResponseResolver
from slackend.secrets import SecretsManagerError
from slackend.settings import SettingModel, SettingsProvider, route_prefix
from slackend.types import SlackClient

from .app import web_factory

__all__: list[str] = [
    "create_slack_app",
    "get_gateway",
]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


async def get_gateway(request: Request) -> SlackGateway:
    """Resolve the process-wide gateway, building it on the first request."""
    provider: GatewayProvider = request.app.state.gateway_provider
    return await provider.get()


def _build_router(prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix)

    @router.get("/health")
    async def health_check() -> JSONResponse:
        """Health check endpoint for monitoring and load balancers."""
        return JSONResponse(content={"ok": True})

    @router.get("/install")
    async def install(gateway: SlackGateway = Depends(get_gateway)) -> Response:
        """Redirect to the Slack app installation page."""
        return ResponseResolver(gateway.settings).install()

    @router.get("/oauth")
    async def oauth(request: Request, gateway: SlackGateway = Depends(get_gateway)) -> Response:
        """Complete the classic OAuth flow."""
        outcome = await gateway.handle_oauth(request.query_params)
        return ResponseResolver(gateway.settings).resolve(outcome)

    @router.get("/oauth/v2")
    async def oauth_v2(request: Request, gateway: SlackGateway = Depends(get_gateway)) -> Response:
        """Complete the v2 (granular permissions) OAuth flow."""
        outcome = await gateway.handle_oauth(request.query_params, version="v2")
        return ResponseResolver(gateway.settings).resolve(outcome)

    @router.post("/callbacks")
    async def callbacks(request: Request, gateway: SlackGateway = Depends(get_gateway)) -> Response:
        """Handle interactive callbacks (form field ``payload`` holding JSON)."""
        outcome = await gateway.handle_callback(await request.body(), request.headers)
        return ResponseResolver(gateway.settings).resolve(outcome)

    @router.post("/events")
    async def events(request: Request, gateway: SlackGateway = Depends(get_gateway)) -> Response:
        """Handle Events API requests, answering ``url_verification`` handshakes."""
        outcome = await gateway.handle_event(await request.body(), request.headers)
        return ResponseResolver(gateway.settings).resolve(outcome)

    @router.post("/slash/{cmd}")
    async def slash(cmd: str, request: Request, gateway: SlackGateway = Depends(get_gateway)) -> Response:
        """Handle a slash command; ``cmd`` names the command."""
        outcome = await gateway.handle_slash(await request.body(), request.headers, cmd)
        return ResponseResolver(gateway.settings).resolve(outcome)

    return router


def create_slack_app(
    settings: Optional[SettingModel] = None,
    *,
    settings_provider: Optional[SettingsProvider] = None,
    publisher: Optional[PublishAdapter] = None,
    slack_client: Optional[SlackClient] = None,
    clock: Optional[Clock] = None,
    base_path: Optional[str] = None,
) -> FastAPI:
    """Create a FastAPI app serving the Slack gateway.

    Parameters
    ----------
    settings : Optional[SettingModel]
        A resolved settings snapshot. When omitted, settings are loaded
        lazily by ``settings_provider`` (or a default one) on the first request.
    settings_provider : Optional[SettingsProvider]
        Lazy settings source, used when ``settings`` is not given
    publisher : Optional[PublishAdapter]
        Publish adapter; built from settings on first use when omitted
    slack_client : Optional[SlackClient]
        Slack client for the OAuth flow; built from settings when omitted
    clock : Optional[Clock]
        Time source for signature verification
    base_path : Optional[str]
        Mount path of the routes; defaults to ``settings.base_path``

    Returns
    -------
    FastAPI
        The FastAPI app
    """
    if settings is not None:
        settings_provider = SettingsProvider.of(settings)
    elif settings_provider is None:
        settings_provider = SettingsProvider()

    if base_path is not None:
        prefix = route_prefix(base_path)
    elif settings is not None:
        prefix = settings.route_prefix
    else:
        prefix = ""

    app = web_factory.create()
    app.state.gateway_provider = GatewayProvider(
        settings_provider,
        publisher=publisher,
        slack_client=slack_client,
        clock=clock,
    )

    @app.exception_handler(ConfigurationError)
    @app.exception_handler(SecretsManagerError)
    async def gateway_unavailable(request: Request, exc: Exception) -> JSONResponse:
        _LOG.error(f"RESPONSE [500] {exc}")
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(exc)})

    app.include_router(_build_router(prefix))
    _LOG.info(f"Slack gateway routes mounted at '{prefix or '/'}'")
    return app
