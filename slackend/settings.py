import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, Final, Literal, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

_LOG: Final[logging.Logger] = logging.getLogger(__name__)

DEFAULT_OAUTH_SUCCESS_URI: Final[str] = "slack://channel?team={TEAM_ID}&id={CHANNEL_ID}"

_FALSY: Final[frozenset[str]] = frozenset({"", "0", "false", "no", "off"})


def normalize_base_path(path: Optional[str]) -> str:
    """Normalize a mount path to ``/`` or ``/prefix`` without a trailing slash."""
    path = (path or "").strip().strip("/")
    return "/" + path if path else "/"


def route_prefix(path: Optional[str]) -> str:
    """Router prefix for a mount path: empty for the root, ``/prefix`` otherwise."""
    normalized = normalize_base_path(path)
    return "" if normalized == "/" else normalized


class PublisherBackend(str, Enum):
    """Supported publish adapter backends."""

    QUEUE = "queue"
    SNS = "sns"
    EVENTBRIDGE = "eventbridge"
    PUBSUB = "pubsub"
    CHAT = "chat"


class LogLevel(str, Enum):
    """Supported logging levels."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"
    NOTSET = "NOTSET"


class SettingModel(BaseSettings):
    """
    Configuration snapshot of the Slack gateway.
    Loads values from environment variables or a .env file and is immutable
    once constructed.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        frozen=True,
    )

    # Slack app credentials
    client_id: Optional[str] = Field(default=None, validation_alias="SLACK_CLIENT_ID")
    client_secret: Optional[SecretStr] = Field(default=None, validation_alias="SLACK_CLIENT_SECRET")
    token: Optional[SecretStr] = Field(
        default=None, validation_alias=AliasChoices("SLACK_TOKEN", "SLACK_BOT_TOKEN")
    )

    # Request verification
    signing_secret: Optional[SecretStr] = Field(default=None, validation_alias="SLACK_SIGNING_SECRET")
    signing_version: str = Field(default="v0", validation_alias="SLACK_SIGNING_VERSION")
    disable_verification: bool = Field(default=False, validation_alias="SLACK_DISABLE_VERIFICATION")

    # OAuth flow
    redirect_uri: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SLACK_OAUTH_REDIRECT_URI", "SLACK_REDIRECT_URI")
    )
    oauth_success_uri: Optional[str] = Field(default=None, validation_alias="SLACK_OAUTH_SUCCESS_URI")
    oauth_error_uri: Optional[str] = Field(default=None, validation_alias="SLACK_OAUTH_ERROR_URI")
    oauth_install_uri: Optional[str] = Field(default=None, validation_alias="SLACK_OAUTH_INSTALL_URI")

    # Topic naming
    topic_prefix: str = Field(default="", validation_alias=AliasChoices("SLACK_TOPIC_PREFIX", "TOPIC_PREFIX"))
    topic_suffix: str = Field(default="", validation_alias=AliasChoices("SLACK_TOPIC_SUFFIX", "TOPIC_SUFFIX"))

    # HTTP surface
    base_path: str = Field(default="/", validation_alias=AliasChoices("BASE_PATH", "BASE_URL"))

    # Publish backend settings
    publisher: PublisherBackend = Field(default=PublisherBackend.QUEUE, validation_alias="SLACKEND_PUBLISHER")
    sns_topic_arn_prefix: Optional[str] = Field(default=None, validation_alias="AWS_SNS_TOPIC_ARN_PREFIX")
    eventbridge_bus_name: str = Field(default="default", validation_alias="AWS_EVENTBRIDGE_BUS_NAME")
    eventbridge_source: str = Field(default="com.slack", validation_alias="AWS_EVENTBRIDGE_SOURCE")
    eventbridge_detail_type: str = Field(default="Slack Event", validation_alias="AWS_EVENTBRIDGE_DETAIL_TYPE")
    pubsub_project_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("PUBSUB_PROJECT_ID", "GOOGLE_CLOUD_PROJECT")
    )
    aws_region: Optional[str] = Field(default=None, validation_alias=AliasChoices("AWS_REGION", "AWS_DEFAULT_REGION"))
    aws_secret: Optional[str] = Field(default=None, validation_alias="AWS_SECRET")

    # Relay settings
    relay_method: Literal["postMessage", "postEphemeral"] = Field(
        default="postMessage", validation_alias="SLACKEND_RELAY_METHOD"
    )

    # Logging settings
    log_level: LogLevel = Field(default=LogLevel.INFO, validation_alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, validation_alias="LOG_FILE")
    log_dir: str = Field(default="logs", validation_alias="LOG_DIR")
    log_format: str = Field(
        default="%(asctime)s [%(levelname)8s] %(name)s: %(message)s", validation_alias="LOG_FORMAT"
    )

    @field_validator("disable_verification", mode="before")
    @classmethod
    def parse_disable_verification(cls, v):
        """Any non-empty value other than an explicit false disables verification."""
        if isinstance(v, str):
            return v.strip().lower() not in _FALSY
        return bool(v)

    @field_validator("base_path", mode="before")
    @classmethod
    def parse_base_path(cls, v):
        return normalize_base_path(v)

    @field_validator("topic_prefix", "topic_suffix", mode="before")
    @classmethod
    def parse_topic_affix(cls, v):
        return v or ""

    @property
    def route_prefix(self) -> str:
        """Prefix to mount the gateway routes under (empty for the root path)."""
        return route_prefix(self.base_path)

    @property
    def success_uri_template(self) -> str:
        return self.oauth_success_uri or DEFAULT_OAUTH_SUCCESS_URI

    def secret_value(self, name: str) -> Optional[str]:
        """Return the plain value of a ``SecretStr`` setting, or ``None`` when unset."""
        secret: Optional[SecretStr] = getattr(self, name)
        if secret is None:
            return None
        return secret.get_secret_value() or None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """
        Customize the settings sources to prioritize .env file over environment variables.
        Explicit overrides (including values fetched from a secret store) win over both.
        """
        return init_settings, dotenv_settings, env_settings, file_secret_settings


def by_field_name(values: Dict[str, Any]) -> Dict[str, Any]:
    """Re-key ``values`` by settings field name, accepting the environment variable names too."""
    names: Dict[str, str] = {}
    for name, info in SettingModel.model_fields.items():
        alias = info.validation_alias
        choices = alias.choices if isinstance(alias, AliasChoices) else [alias] if alias else []
        names.update({str(choice).lower(): name for choice in choices})
        names[name] = name
    return {names.get(key.lower(), key): value for key, value in values.items()}


_settings: Optional[SettingModel] = None


def get_settings(
    env_file: Optional[str] = ".env", no_env_file: bool = False, force_reload: bool = False, **kwargs
) -> SettingModel:
    """
    Get the process-wide settings instance.

    Parameters
    ----------
    env_file : Optional[str], optional
        Path to the .env file, by default ".env"
    no_env_file : bool, optional
        Whether to skip loading the .env file, by default False
    force_reload : bool, optional
        Whether to force a reload of the settings, by default False
    **kwargs
        Additional settings to override

    Returns
    -------
    SettingModel
        The settings instance
    """
    global _settings

    if _settings is None or force_reload:
        actual_env_file = None if no_env_file else env_file
        _settings = SettingModel(_env_file=actual_env_file, **kwargs)
    return _settings


class SettingsProvider:
    """Lazy, single-flight source of the gateway settings.

    The first caller of :meth:`get` builds the settings, merging the JSON
    secret named by ``AWS_SECRET`` when one is configured. Concurrent first
    callers wait on the same lock and receive the same instance. A failed
    load is not cached, so the next request tries again.

    Examples
    --------
    .. code-block:: python

        provider = SettingsProvider(no_env_file=True)
        settings = await provider.get()
    """

    def __init__(
        self,
        env_file: Optional[str] = ".env",
        no_env_file: bool = False,
        secret_loader: Optional[Callable[[str, Optional[str]], Dict[str, Any]]] = None,
        **overrides: Any,
    ):
        self._env_file = None if no_env_file else env_file
        self._secret_loader = secret_loader
        self._overrides = overrides
        self._settings: Optional[SettingModel] = None
        self._lock = asyncio.Lock()
        self.fetch_count = 0

    @classmethod
    def of(cls, settings: SettingModel) -> "SettingsProvider":
        """Wrap an already resolved settings snapshot."""
        provider = cls(no_env_file=True)
        provider._settings = settings
        return provider

    @property
    def cached(self) -> Optional[SettingModel]:
        return self._settings

    async def get(self) -> SettingModel:
        if self._settings is not None:
            return self._settings
        async with self._lock:
            if self._settings is None:
                self._settings = await self._load()
        return self._settings

    async def _load(self) -> SettingModel:
        self.fetch_count += 1
        settings = SettingModel(_env_file=self._env_file, **self._overrides)
        if not settings.aws_secret:
            return settings

        _LOG.info(f"FETCH {settings.aws_secret}")
        loader = self._secret_loader
        if loader is None:
            from .secrets import get_secret

            loader = get_secret
        secret_values = await asyncio.to_thread(loader, settings.aws_secret, settings.aws_region)
        merged = {**by_field_name(secret_values), **by_field_name(self._overrides)}
        return SettingModel(_env_file=self._env_file, **merged)
