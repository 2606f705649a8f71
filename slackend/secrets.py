"""
AWS Secrets Manager client.

Fetches the JSON secret holding the Slack credentials (``SLACK_SIGNING_SECRET``,
``SLACK_CLIENT_SECRET``, ``SLACK_TOKEN``, ...) so they can be merged into the
gateway settings.
"""

import json
import logging
from typing import Any, Dict, Final, Optional

import boto3
from botocore.exceptions import ClientError

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


class SecretsManagerError(Exception):
    """Base exception for Secrets Manager errors."""


class SecretNotFoundError(SecretsManagerError):
    """Raised when a secret is not found in Secrets Manager."""

    def __init__(self, secret_name: str):
        self.secret_name = secret_name
        self.message = f"Secret {secret_name} not found"
        super().__init__(self.message)


class InvalidSecretFormatError(SecretsManagerError):
    """Raised when secret format is invalid."""

    def __init__(self, secret_name: str, reason: str):
        self.secret_name = secret_name
        self.reason = reason
        self.message = f"Invalid secret format for {secret_name}: {reason}"
        super().__init__(self.message)


def get_secret(secret_name: str, region: Optional[str] = None) -> Dict[str, Any]:
    """
    Fetch a JSON object secret from AWS Secrets Manager.

    Args:
        secret_name: Secret name or ARN
        region: AWS region, defaults to the boto3 session region

    Returns:
        The decoded secret key/value pairs

    Raises:
        SecretNotFoundError: The secret does not exist
        InvalidSecretFormatError: The secret is not a JSON object
        SecretsManagerError: Any other Secrets Manager failure
    """
    client = boto3.client("secretsmanager", region_name=region) if region else boto3.client("secretsmanager")

    try:
        response = client.get_secret_value(SecretId=secret_name)
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        if error_code == "ResourceNotFoundException":
            raise SecretNotFoundError(secret_name) from e
        elif error_code in ("InvalidParameterException", "InvalidRequestException"):
            raise InvalidSecretFormatError(secret_name, e.response["Error"]["Message"]) from e
        elif error_code == "DecryptionFailureException":
            raise SecretsManagerError(f"Failed to decrypt secret: {secret_name}") from e
        raise SecretsManagerError(f"Unexpected error retrieving secret {secret_name}: {error_code}") from e

    try:
        secret = json.loads(response["SecretString"])
    except (KeyError, json.JSONDecodeError) as e:
        raise InvalidSecretFormatError(secret_name, "expected a JSON SecretString") from e

    if not isinstance(secret, dict):
        raise InvalidSecretFormatError(secret_name, f"expected a JSON object, got {type(secret).__name__}")

    _LOG.debug(f"Fetched {len(secret)} keys from secret {secret_name}")
    return secret
