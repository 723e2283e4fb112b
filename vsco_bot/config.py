"""Configuration management for the VSCO media bot.

Handles all application configuration: environment variables (optionally
from a ``.env`` file), the YAML fetch defaults shipped in ``config/fetch.yml``,
and built-in defaults. Provides structured configuration classes for the
Telegram side of the bot and for the fetch policy.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_CONFIG_DIR = Path(__file__).parent / "config"


class YamlSectionSettingsSource(PydanticBaseSettingsSource):
    """Settings source reading one top-level section of a YAML file.

    The file path comes from the ``yaml_file`` entry of the model config. Values
    are keyed by field name, so any aliased source (environment, ``.env``)
    still wins when both are present. A missing file or section yields no
    values.
    """

    def __init__(self, settings_cls: type[BaseSettings], section: str | None = None):
        super().__init__(settings_cls)
        yaml_file = self.config.get("yaml_file")

        data: dict[str, Any] = {}
        if yaml_file is not None and Path(yaml_file).exists():
            with open(yaml_file) as f:
                data = yaml.safe_load(f) or {}
        self.data: dict[str, Any] = (data.get(section) if section else data) or {}

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self.data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value is not None:
                values[key] = value
        return values


class FetchConfig(BaseSettings):
    """Media fetch policy.

    Attributes:
        media_limit: Number of recent media requested from VSCO per message.
        thread_replies: Whether media groups reply to the user's message.
        status_delete_delay: Seconds before the "Downloading" notice is removed.
        allow_group_chats: Whether /start is answered outside private chats.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
        yaml_file=DEFAULT_CONFIG_DIR / "fetch.yml",
    )

    media_limit: int = Field(default=10, ge=1, validation_alias="FETCH_MEDIA_LIMIT")
    thread_replies: bool = Field(default=True, validation_alias="FETCH_THREAD_REPLIES")
    status_delete_delay: float = Field(
        default=3.0, ge=0, validation_alias="FETCH_STATUS_DELETE_DELAY"
    )
    allow_group_chats: bool = Field(default=False, validation_alias="FETCH_ALLOW_GROUP_CHATS")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # fetch.yml only fills what nothing else sets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
            YamlSectionSettingsSource(settings_cls, section="fetch"),
        )


def load_fetch_config(yaml_file: Path) -> FetchConfig:
    """Build a FetchConfig whose YAML defaults come from ``yaml_file``."""
    if yaml_file == FetchConfig.model_config.get("yaml_file"):
        return FetchConfig()

    class FileFetchConfig(FetchConfig):
        model_config = SettingsConfigDict(yaml_file=yaml_file)

    return FileFetchConfig()


class BotConfig(BaseSettings):
    """Main Telegram bot configuration.

    Attributes:
        bot_token: Telegram bot API token from environment.
        port: Server port for webhook mode.
        listen_host: Interface the webhook server binds to.
        webhook_domain_override: Explicit public domain for webhooks.
        railway_domain: Railway public domain for webhooks.
        railway_url: Railway URL for webhooks (fallback).
        timeout: HTTP request timeout in seconds for VSCO requests.
        log_level: Root logging level.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    bot_token: str = Field(default="", validation_alias="BOT_TOKEN")
    port: int = Field(default=8000, validation_alias="PORT")
    listen_host: str = Field(default="127.0.0.1", validation_alias="BOT_LISTEN_HOST")
    webhook_domain_override: str | None = Field(default=None, validation_alias="WEBHOOK_DOMAIN")
    railway_domain: str | None = Field(default=None, validation_alias="RAILWAY_PUBLIC_DOMAIN")
    railway_url: str | None = Field(default=None, validation_alias="RAILWAY_URL")
    timeout: int = 20
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def webhook_domain(self) -> str | None:
        """Get webhook domain for deployment.

        Returns:
            Domain string if available, None for polling mode.
        """
        return self.webhook_domain_override or self.railway_domain or self.railway_url

    @property
    def use_webhook(self) -> bool:
        """Determine if webhook mode should be used.

        Returns:
            True if webhook domain is configured, False for polling mode.
        """
        return bool(self.webhook_domain)


class Config:
    """Application configuration manager.

    Centralizes loading of environment variables, the YAML fetch defaults and
    built-in values. Environment variables always win over the YAML file.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to vsco_bot/config.
        """
        if config_dir is None:
            config_dir = DEFAULT_CONFIG_DIR

        self.config_dir = Path(config_dir)

        self.bot = BotConfig()

        self.fetch = load_fetch_config(self.config_dir / "fetch.yml")


# Global configuration instance
config = Config()
