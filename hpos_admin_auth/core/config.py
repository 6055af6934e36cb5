"""
Configuration Management

Centralized configuration using Pydantic Settings.
All settings loaded from environment variables; HPOS_STATE_PATH is required.
"""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict

from hpos_admin_auth.core.signing.keys import DEFAULT_ADMIN_PUBLIC_KEY_FIELD


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================================
    # HP Admin Key
    # ============================================================
    hpos_state_path: Path = Field(..., description="Path to the HPOS state JSON file")
    admin_public_key_field: str = Field(
        DEFAULT_ADMIN_PUBLIC_KEY_FIELD,
        description="Dotted path of the HP Admin public key inside the state file"
    )

    # ============================================================
    # Listener
    # ============================================================
    listen_host: str = Field("127.0.0.1", description="Address to bind (loopback only behind the proxy)")
    listen_port: int = Field(2884, description="Port to bind (2884 spells 'auth' on a phone keypad)")

    # ============================================================
    # Logging Configuration
    # ============================================================
    log_level: str = Field("INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    @property
    def listen_url(self) -> str:
        return f"http://{self.listen_host}:{self.listen_port}"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton).

    Raises:
        pydantic.ValidationError: If HPOS_STATE_PATH is not set
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings
