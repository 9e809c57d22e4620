"""Centralized settings management for the event forwarder."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings powered by pydantic-settings.

    Loads configuration from ``EVENT_FORWARDER_*`` environment variables
    and an optional ``.env`` file in the working directory.
    """

    # -------------------------------------------------------------------------
    # SERVER
    # -------------------------------------------------------------------------
    # Console base URL used for deep links; empty disables link enrichment.
    CB_SERVER_URL: str = ""

    # -------------------------------------------------------------------------
    # REPORT API
    # -------------------------------------------------------------------------
    CB_API_TOKEN: SecretStr | None = None
    CB_API_SSL_VERIFY: bool = True
    CB_API_TIMEOUT: float = 10.0
    CB_API_MAX_RETRIES: int = 3

    # -------------------------------------------------------------------------
    # DIAGNOSTICS
    # -------------------------------------------------------------------------
    DEBUG: bool = False
    DEBUG_STORE: Path = Path("/tmp/event-forwarder-debug")
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------
    # CONFIG_DIR points to event_forwarder/configs
    CONFIG_DIR: Path = Path(__file__).resolve().parent
    CONFIG_PATH: Path = CONFIG_DIR / "forwarder.yaml"

    model_config = SettingsConfigDict(
        env_prefix="EVENT_FORWARDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        # Allow extra fields in .env but ignore them in the model
        extra="ignore",
    )

    @property
    def report_api_enabled(self) -> bool:
        """Report enrichment needs both the server URL and an API token."""
        return bool(self.CB_SERVER_URL and self.CB_API_TOKEN)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns
    -------
    Settings
        The singleton settings instance.
    """
    return Settings()
