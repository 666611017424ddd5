"""Process configuration — env-driven.

Centralized config using pydantic-settings.  Reads from a .env file and
BUILDHERALD_* environment variables.  Values here are defaults; the rules
file's ``[notifier]`` section overrides them.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class HeraldSettings(BaseSettings):
    """Notifier configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export BUILDHERALD_SERVER_HOST=https://go.example.com
        export BUILDHERALD_WEBHOOK_URL=https://hooks.slack.com/services/T000/B000/XXXX
        export BUILDHERALD_LOG_LEVEL=DEBUG

    Or via .env file::

        BUILDHERALD_CHANNEL=#ci
        BUILDHERALD_RULES_PATH=/etc/buildherald/rules.toml
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BUILDHERALD_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"

    # Rules file
    rules_path: Path = Path("buildherald.toml")

    # Go server API
    server_host: str = "http://localhost:8153"
    api_username: str = ""
    api_password: str = ""
    api_token: str = ""

    # Chat webhook
    webhook_url: str = ""
    channel: str = ""
    display_name: str = "gocd-slack-bot"
    icon_url: str = ""

    # HTTP
    proxy: str = ""
    http_timeout_seconds: float = 15.0

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def notifier_defaults(self) -> dict[str, str]:
        """Settings that seed the rules file's ``[notifier]`` section."""
        values = {
            "server_host": self.server_host,
            "webhook_url": self.webhook_url,
            "channel": self.channel,
            "display_name": self.display_name,
            "icon_url": self.icon_url,
        }
        return {key: value for key, value in values.items() if value}


# Module-level singleton — import as `from buildherald.config import settings`
settings = HeraldSettings()
