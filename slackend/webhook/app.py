"""
FastAPI web server factory for the Slack gateway.

The gateway serves a single FastAPI app per process. ``web_factory`` keeps
that instance so the entry point, the route setup and tests all see the same
one.

.. code-block:: python

    from slackend.webhook.app import web_factory

    app = web_factory.create()
    assert web_factory.get() is app
    web_factory.reset()  # tests only
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Type

from fastapi import FastAPI

from slackend import __version__

_LOG: Final[logging.Logger] = logging.getLogger(__name__)

_WEB_SERVER_INSTANCE: Optional[FastAPI] = None


class WebServerFactory:
    @staticmethod
    def create(**kwargs) -> FastAPI:
        """
        Create the web server instance.

        Args:
            **kwargs: Additional arguments passed to ``FastAPI``

        Returns:
            A new FastAPI instance
        """
        global _WEB_SERVER_INSTANCE
        assert _WEB_SERVER_INSTANCE is None, "It is not allowed to create more than one instance of web server."
        _WEB_SERVER_INSTANCE = FastAPI(
            title="slackend",
            description="Slack webhook gateway publishing callbacks, events and slash commands to a message bus",
            version=__version__,
            **kwargs,
        )
        _LOG.debug("Created the gateway web server instance")
        return _WEB_SERVER_INSTANCE

    @staticmethod
    def get() -> FastAPI:
        """
        Get the web API server instance

        Returns:
            Configured FastAPI server instance
        """
        assert _WEB_SERVER_INSTANCE is not None, "It must be created web server first."
        return _WEB_SERVER_INSTANCE

    @staticmethod
    def reset() -> None:
        """
        Reset the singleton instance (for testing purposes).
        """
        global _WEB_SERVER_INSTANCE
        _WEB_SERVER_INSTANCE = None


web_factory: Final[Type[WebServerFactory]] = WebServerFactory
