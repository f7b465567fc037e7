"""Configuration management with Pydantic and XDG base directory support."""

import logging
import os
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_KEYSERVER_URL = "https://keys.sylabs.io"
DEFAULT_KEY_LENGTH_BITS = 4096


def get_xdg_data_home() -> Path:
    """Get XDG_DATA_HOME directory, defaulting to ~/.local/share."""
    xdg_data = os.getenv("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_xdg_config_home() -> Path:
    """Get XDG_CONFIG_HOME directory, defaulting to ~/.config."""
    xdg_config = os.getenv("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


class Settings(BaseSettings):
    """SifSign configuration settings.

    Precedence: CLI flag > environment variable > .env file > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="SIFSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Keystore
    keyserver_url: str = Field(
        default=DEFAULT_KEYSERVER_URL,
        description="Base URL of the remote keystore",
    )

    auth_token: SecretStr | None = Field(
        default=None,
        description="Bearer token for keystore requests (falls back to <config_dir>/token)",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout for keystore HTTP requests (seconds)",
    )

    # Key generation
    key_length_bits: int = Field(
        default=DEFAULT_KEY_LENGTH_BITS,
        ge=2048,
        description="Bit length of newly generated RSA key pairs",
    )

    # Directories
    keyring_dir: Path | None = Field(
        default=None,
        description="Override keyring directory (defaults to XDG_DATA_HOME/sifsign/keys)",
    )

    config_dir: Path | None = Field(
        default=None,
        description="Override config directory (defaults to XDG_CONFIG_HOME/sifsign)",
    )

    def get_keyring_dir(self) -> Path:
        """Get the keyring directory, creating if necessary."""
        if self.keyring_dir:
            keyring_dir = self.keyring_dir
        else:
            keyring_dir = get_xdg_data_home() / "sifsign" / "keys"

        keyring_dir.mkdir(parents=True, exist_ok=True)
        return keyring_dir

    def get_config_dir(self) -> Path:
        """Get the config directory, creating if necessary."""
        if self.config_dir:
            config_dir = self.config_dir
        else:
            config_dir = get_xdg_config_home() / "sifsign"

        config_dir.mkdir(parents=True, exist_ok=True)
        return config_dir

    def get_token_path(self) -> Path:
        """Return the location of the stored keystore token."""
        return self.get_config_dir() / "token"

    def get_auth_token(self) -> str:
        """Return the keystore auth token, or an empty string when none is configured."""
        if self.auth_token is not None:
            return self.auth_token.get_secret_value()

        token_path = self.get_token_path()
        try:
            return token_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return ""
        except OSError as exc:
            logger.warning("Ignoring unreadable token file %s: %s", token_path, exc)
            return ""


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
