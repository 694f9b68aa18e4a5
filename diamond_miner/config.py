"""Application configuration settings."""
import os
import json
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Diamond Miner"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS settings - as comma-separated string or JSON array
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Gameplay settings
    hints_per_game: int = Field(default=4, ge=0)
    hint_cooldown: float = Field(default=3.0, ge=0.0)  # seconds between hints
    explode_delay: float = Field(default=0.25, ge=0.0)  # dig -> explosion
    hint_step: float = Field(default=0.05, ge=0.0)  # per (x + y) in the hint sweep
    explosion_lifetime: float = Field(default=1.0, ge=0.0)

    # Pool preallocation
    tile_pool_size: int = Field(default=64, ge=0)
    effect_pool_size: int = Field(default=64, ge=0)

    # Live API sessions kept before the least recently used is evicted
    max_sessions: int = Field(default=100, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def get_cors_origins(self) -> List[str]:
        """Parse CORS origins from string (comma-separated or JSON)."""
        if not self.cors_origins:
            return ["http://localhost:5173"]

        # Try JSON parse first
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
        except json.JSONDecodeError:
            pass

        # Fall back to comma-separated
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Don't use lru_cache so env var updates are picked up in debug mode
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings instance (cached unless DEBUG is set)."""
    global _settings
    if _settings is None or os.getenv("DEBUG", "false").lower() == "true":
        _settings = Settings()
    return _settings
