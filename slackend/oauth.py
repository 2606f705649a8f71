"""OAuth installation flow.

Slack redirects the installing user to ``/oauth`` (or ``/oauth/v2``) with a
temporary ``code``; the gateway exchanges it for a token through
``oauth.access`` / ``oauth.v2.access`` and, once the result is published,
sends the user on to a success URI.
"""

from __future__ import annotations

import logging
from typing import Final, Literal, Optional

from slack_sdk.errors import SlackApiError

from .errors import OAuthError
from .settings import SettingModel
from .types import SlackClient, SlackPayload

__all__: list[str] = ["OAuthVersion", "exchange_code", "resolve_success_uri"]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)

OAuthVersion = Optional[Literal["v2"]]


async def exchange_code(
    client: SlackClient, code: str, settings: SettingModel, version: OAuthVersion = None
) -> SlackPayload:
    """Exchange a temporary OAuth code for an access token.

    Parameters
    ----------
    client : SlackClient
        Slack ``AsyncWebClient`` (or anything exposing ``oauth_access`` / ``oauth_v2_access``)
    code : str
        The ``code`` query parameter Slack redirected with
    settings : SettingModel
        Provides ``client_id``, ``client_secret`` and ``redirect_uri``
    version : OAuthVersion
        ``"v2"`` for the granular-permissions flow, ``None`` for the classic one

    Returns
    -------
    SlackPayload
        The token exchange response body

    Raises
    ------
    OAuthError
        If the app credentials are missing or Slack rejects the exchange
    """
    client_secret = settings.secret_value("client_secret")
    if not settings.client_id or not client_secret:
        raise OAuthError("OAuth client credentials are not configured")

    kwargs = {
        "client_id": settings.client_id,
        "client_secret": client_secret,
        "code": code,
        "redirect_uri": settings.redirect_uri,
    }
    try:
        if version == "v2":
            response = await client.oauth_v2_access(**kwargs)
        else:
            response = await client.oauth_access(**kwargs)
    except SlackApiError as e:
        _LOG.error(f"OAuth token exchange rejected: {e.response.get('error')}")
        raise OAuthError("OAuth token exchange rejected", detail=e.response.get("error")) from e
    except Exception as e:
        _LOG.error(f"OAuth token exchange failed: {e}")
        raise OAuthError("OAuth token exchange failed", detail=str(e)) from e

    data = response.data if hasattr(response, "data") else response
    return dict(data)


def resolve_success_uri(token_result: SlackPayload, settings: SettingModel) -> str:
    """Substitute ``{TEAM_ID}`` and ``{CHANNEL_ID}`` from the token result into the success URI.

    The team id is read from ``team.id`` (v2 responses) or ``team_id`` (classic
    responses); the channel id from ``incoming_webhook.channel_id``. Missing
    values substitute as empty strings.
    """
    team = token_result.get("team")
    team_id = team.get("id") if isinstance(team, dict) else None
    team_id = team_id or token_result.get("team_id") or ""

    webhook = token_result.get("incoming_webhook")
    channel_id = (webhook.get("channel_id") if isinstance(webhook, dict) else None) or ""

    return settings.success_uri_template.replace("{TEAM_ID}", str(team_id)).replace("{CHANNEL_ID}", str(channel_id))
