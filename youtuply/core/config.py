"""Youtuply configuration"""

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from youtuply.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# === Path Configuration ===
PACKAGE_DIR = Path(__file__).parent.parent
PROJECT_DIR = PACKAGE_DIR.parent
DATA_DIR = PROJECT_DIR / "data"

BOT_NAME = "Youtuply"


class YoutuplySettings(BaseSettings):
    """Bot settings, read from the environment and ``.env``"""

    model_config = SettingsConfigDict(
        env_file=PROJECT_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Discord
    discord_bot_token: str = Field(default="", description="Discord bot token")

    # Storage
    data_dir: Path = Field(default=DATA_DIR, description="Directory for settings and credentials")

    # Google OAuth client (installed app / TV & limited-input device)
    youtube_client_id: str = Field(default="", description="Google OAuth client ID")
    youtube_client_secret: str = Field(default="", description="Google OAuth client secret")
    youtube_credentials_file: Path | None = Field(
        default=None, description="Google client secrets JSON (used when id/secret are unset)"
    )

    # Remote endpoints
    oauth_base_url: str = Field(default="https://oauth2.googleapis.com")
    youtube_api_url: str = Field(default="https://www.googleapis.com/youtube/v3")
    http_timeout: float = Field(default=10.0, description="HTTP timeout in seconds")

    # Health server
    health_enabled: bool = Field(default=True)
    port: int = Field(default=8080, description="Health server port")

    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @property
    def settings_dir(self) -> Path:
        return self.data_dir / "settings"

    @property
    def credentials_dir(self) -> Path:
        return self.data_dir / "credentials"

    def client_credentials(self) -> tuple[str, str]:
        """Return ``(client_id, client_secret)`` for the Google OAuth client.

        Falls back to the client secrets file downloaded from the Google
        Cloud console (``{"installed": {...}}``), by default
        ``<data_dir>/credentials/youtubeauth.json``.
        """
        if self.youtube_client_id and self.youtube_client_secret:
            return self.youtube_client_id, self.youtube_client_secret

        path = self.youtube_credentials_file or self.credentials_dir / "youtubeauth.json"
        try:
            secrets = json.loads(path.read_text(encoding="utf-8"))
            client = secrets.get("installed") or secrets.get("web") or secrets
            return client["client_id"], client["client_secret"]
        except (OSError, ValueError, KeyError, AttributeError, TypeError) as e:
            raise ConfigurationError(
                "YouTube client credentials are not configured: set YOUTUBE_CLIENT_ID and "
                f"YOUTUBE_CLIENT_SECRET or provide {path}"
            ) from e


@lru_cache
def get_settings() -> YoutuplySettings:
    """Get cached settings instance"""
    return YoutuplySettings()
