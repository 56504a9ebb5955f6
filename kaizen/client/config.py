"""Timer client configuration using Pydantic Settings."""
from pathlib import Path
from typing import Optional

import appdirs
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Client settings loaded from KAIZEN_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KAIZEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = "http://localhost:8000"
    token: Optional[str] = None
    cache_dir: Optional[Path] = None
    request_timeout: float = 10.0
    tick_interval: float = 1.0
    log_level: str = "WARNING"

    @property
    def resolved_cache_dir(self) -> Path:
        """Configured cache directory, or the platform user cache dir."""
        if self.cache_dir is not None:
            return self.cache_dir
        return Path(appdirs.user_cache_dir("kaizen"))
