"""Maps pipeline outcomes to the public HTTP contract.

=======================================  ==========================================
Outcome                                  Response
=======================================  ==========================================
verification failed (stale / mismatch)   403 ``{"error": ...}``
malformed payload                        400 ``{"error": ...}``
``url_verification`` handshake           200 ``{"challenge": ...}``
callback / event / slash published       204
callback / event / slash publish failed  400 with the adapter's error as the body
OAuth published                          302 to the resolved success URI
OAuth publish failed                     500 ``{"error": <adapter detail>}``
OAuth denied or exchange failed          302 to ``oauth_error_uri``, else 403
=======================================  ==========================================
"""

from __future__ import annotations

import logging
from typing import Any, Final

from fastapi import Response, status
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from .model import OAuthEnvelope
from .pipeline import (
    Accepted,
    Challenged,
    OAuthCompleted,
    OAuthDenied,
    PipelineOutcome,
    PublishFailed,
    Rejected,
)
from .settings import SettingModel

__all__: list[str] = ["ResponseResolver"]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


def _error(status_code: int, error: Any) -> JSONResponse:
    log = _LOG.warning if status_code < 500 else _LOG.error
    log(f"RESPONSE [{status_code}] {error}")
    return JSONResponse(status_code=status_code, content={"error": error})


def _raw_error(status_code: int, error: Any) -> Response:
    _LOG.warning(f"RESPONSE [{status_code}] {error}")
    if isinstance(error, str):
        return PlainTextResponse(content=error, status_code=status_code)
    return JSONResponse(status_code=status_code, content=error)


def _redirect(uri: str) -> RedirectResponse:
    _LOG.info(f"RESPONSE [302] {uri}")
    return RedirectResponse(url=uri, status_code=status.HTTP_302_FOUND)


class ResponseResolver:
    """Turns a :data:`~slackend.pipeline.PipelineOutcome` into a FastAPI response."""

    def __init__(self, settings: SettingModel):
        self.settings = settings

    def resolve(self, outcome: PipelineOutcome) -> Response:
        match outcome:
            case Challenged(challenge=challenge):
                _LOG.info(f"RESPONSE [200] {challenge}")
                return JSONResponse(content={"challenge": challenge})
            case Accepted(topic=topic):
                _LOG.info(f"RESPONSE [204] {topic}")
                return Response(status_code=status.HTTP_204_NO_CONTENT)
            case OAuthCompleted(redirect_uri=uri):
                return _redirect(uri)
            case OAuthDenied(error=error):
                if self.settings.oauth_error_uri:
                    return _redirect(self.settings.oauth_error_uri)
                return _error(status.HTTP_403_FORBIDDEN, error.detail)
            case PublishFailed(envelope=OAuthEnvelope(), error=error):
                return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, error)
            case PublishFailed(error=error):
                return _raw_error(status.HTTP_400_BAD_REQUEST, error)
            case Rejected(error=error):
                return _error(error.status_code, error.message)
        raise TypeError(f"Unknown pipeline outcome: {outcome!r}")

    def install(self) -> Response:
        """Send the user to the app's installation page."""
        if not self.settings.oauth_install_uri:
            return _error(status.HTTP_404_NOT_FOUND, "Install URI not configured")
        return _redirect(self.settings.oauth_install_uri)
