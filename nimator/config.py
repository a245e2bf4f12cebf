from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Layers / checks / notifiers document
    settings_file: str = "nimator.yaml"

    # Logging
    log_level: str = "INFO"

    # Default timeout for outbound notifier calls
    http_timeout_seconds: float = 10.0

    # Notifiers (optional — used when the settings document leaves them empty)
    slack_webhook_url: str = ""
    opsgenie_api_key: str = ""
    opsgenie_api_url: str = "https://api.opsgenie.com/v2/alerts"


settings = Settings()
