"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Settings (port also feeds the default Discord redirect URI)
    port: int = 3001

    # Frontend that receives OAuth redirects
    client_url: str = "http://localhost:3000"

    # CORS - comma-separated origins (env var: CORS_ORIGINS), empty = client_url
    cors_origins: str = ""

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins as a list."""
        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        return origins or [self.client_url]

    # Discord OAuth2
    discord_client_id: str = ""
    discord_client_secret: str = ""
    discord_redirect_uri: str = ""

    @computed_field
    @property
    def discord_callback_url(self) -> str:
        """Redirect URI registered with Discord."""
        return self.discord_redirect_uri or f"http://localhost:{self.port}/auth/discord/callback"

    # User sessions
    cookie_secure: bool = False
    session_ttl_seconds: int = 7 * 24 * 60 * 60

    # Box storage (DuckDB file)
    database_path: str = "data/boxes.duckdb"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
