"""Factory pattern implementation for creating Slack clients.

The gateway only talks to Slack through an ``AsyncWebClient`` handed to it
by the host: for the OAuth token exchange and for the chat relay. This module
abstracts how that client is built so tests can substitute their own.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Optional

from slack_sdk.web.async_client import AsyncWebClient

from slackend.settings import SettingModel


class SlackClientFactory(ABC):
    """Abstract base class for Slack client factories."""

    @abstractmethod
    def create_async_client(self, token: Optional[str] = None) -> AsyncWebClient:
        """Create and return an AsyncWebClient instance.

        Parameters
        ----------
        token : Optional[str], optional
            Slack token to use for authentication. If not provided, will try to
            resolve from environment variables.

        Returns
        -------
        AsyncWebClient
            Initialized Slack AsyncWebClient instance.
        """

    def create_from_settings(self, settings: SettingModel) -> AsyncWebClient:
        """Create an AsyncWebClient authenticated with the configured token."""
        return self.create_async_client(settings.secret_value("token"))


class DefaultSlackClientFactory(SlackClientFactory):
    """Default implementation of the SlackClientFactory.

    The token is optional: ``oauth.access`` authenticates with the app's
    client id and secret, so the OAuth routes work before any bot token exists.
    """

    def _resolve_token(self, token: Optional[str] = None) -> Optional[str]:
        """Resolve the Slack token from provided value or environment variables.

        Parameters
        ----------
        token : Optional[str], optional
            Slack token to use if provided, by default None

        Returns
        -------
        Optional[str]
            Resolved token value, ``None`` if no token is available
        """
        return token or os.getenv("SLACK_TOKEN") or os.getenv("SLACK_BOT_TOKEN")

    def create_async_client(self, token: Optional[str] = None) -> AsyncWebClient:
        return AsyncWebClient(token=self._resolve_token(token))


# Default global instance for easy access
default_factory = DefaultSlackClientFactory()
