"""Slack request signature verification.

Slack signs every request with ``HMAC-SHA256(signing_secret, "{version}:{timestamp}:{body}")``
and sends the result as ``X-Slack-Signature: {version}={hex}`` together with
``X-Slack-Request-Timestamp``. A request is accepted when its timestamp lies
within the replay window and the signatures match.

Operational note
================
Setting ``SLACK_DISABLE_VERIFICATION`` or leaving ``SLACK_SIGNING_SECRET``
unset turns verification off entirely and every request is accepted. This is
an operator escape hatch for local development; never deploy it.

.. code-block:: python

    from slackend.verification import SignatureVerifier

    verifier = SignatureVerifier("8f742231b10e8888abcd99yyyzzz85a5")
    result = verifier.verify(body, timestamp="1531420618", signature="v0=a2114d57...")
    if not result.valid:
        print(result.reason)  # "stale" or "mismatch"
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import math
from typing import Final, Optional

from slack_sdk.signature import Clock

from .model import VerificationResult
from .settings import SettingModel
from .types import SlackHeaders

__all__: list[str] = [
    "SignatureVerifier",
    "verify_request",
    "TIMESTAMP_HEADER",
    "SIGNATURE_HEADER",
    "REPLAY_WINDOW_SECONDS",
]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)

TIMESTAMP_HEADER: Final[str] = "x-slack-request-timestamp"
SIGNATURE_HEADER: Final[str] = "x-slack-signature"
REPLAY_WINDOW_SECONDS: Final[int] = 60 * 5


class SignatureVerifier:
    """Validates Slack request signatures for one signing secret."""

    def __init__(
        self,
        signing_secret: str,
        signing_version: str = "v0",
        clock: Optional[Clock] = None,
        max_age: int = REPLAY_WINDOW_SECONDS,
    ):
        self.signing_secret = signing_secret
        self.signing_version = signing_version
        self.clock = clock or Clock()
        self.max_age = max_age

    def compute_signature(self, timestamp: str, body: str) -> str:
        """Return the ``{version}={hex}`` signature Slack would send for this body."""
        data = f"{self.signing_version}:{timestamp}:{body}"
        _LOG.debug(f"SIGNING DATA {data}")
        digest = hmac.new(self.signing_secret.encode("utf-8"), data.encode("utf-8"), hashlib.sha256).hexdigest()
        return f"{self.signing_version}={digest}"

    def verify(self, body: str, timestamp: Optional[str], signature: Optional[str]) -> VerificationResult:
        """Check the request age, then the signature.

        Staleness is reported before a mismatch. A missing or non-numeric
        timestamp (including NaN and infinity) has no age to compare and can only fail as a mismatch.
        """
        given = signature or ""
        computed = self.compute_signature(timestamp or "", body)

        try:
            delta: Optional[float] = abs(self.clock.now() - float(timestamp or ""))
        except ValueError:
            delta = None
        if delta is not None and not math.isfinite(delta):
            delta = None

        _LOG.debug(f"SIGNATURES given={given} computed={computed} delta={delta}")

        if delta is not None and delta > self.max_age:
            _LOG.warning(f"Request too old: delta={delta:.0f}s given={given} computed={computed}")
            return VerificationResult(valid=False, reason="stale")
        if delta is None or not hmac.compare_digest(given.encode("utf-8"), computed.encode("utf-8")):
            _LOG.warning(f"Signatures do not match: given={given} computed={computed}")
            return VerificationResult(valid=False, reason="mismatch")
        return VerificationResult(valid=True)


def verify_request(
    body: str, headers: SlackHeaders, settings: SettingModel, clock: Optional[Clock] = None
) -> VerificationResult:
    """Verify an inbound request against the configured signing secret.

    Parameters
    ----------
    body : str
        The raw request body, exactly as received
    headers : SlackHeaders
        Request headers; must carry the Slack timestamp and signature headers
    settings : SettingModel
        Gateway settings providing the signing secret and version
    clock : Optional[Clock]
        Time source, for tests

    Returns
    -------
    VerificationResult
        Always valid when verification is disabled or no signing secret is set
    """
    if settings.disable_verification:
        _LOG.warning("VERIFICATION DISABLED - ENV")
        return VerificationResult(valid=True)

    signing_secret = settings.secret_value("signing_secret")
    if signing_secret is None:
        _LOG.warning("VERIFICATION DISABLED - NO SIGNING SECRET")
        return VerificationResult(valid=True)

    lowered = {key.lower(): value for key, value in headers.items()}
    verifier = SignatureVerifier(signing_secret, signing_version=settings.signing_version, clock=clock)
    return verifier.verify(body, lowered.get(TIMESTAMP_HEADER), lowered.get(SIGNATURE_HEADER))
