"""Application configuration module."""

from typing import Any, List, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url

DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:5174",
]


class Settings(BaseSettings):
    """
    Application settings using Pydantic BaseSettings.

    Automatically reads from environment variables and a local ``.env`` file.
    """

    # Application settings
    app_name: str = "MemeHustle"
    app_version: str = "0.1.0"
    app_env: str = "development"
    log_level: str = "INFO"
    log_json: bool = True
    log_file: Optional[str] = None

    # Server settings
    host: str = "0.0.0.0"
    port: int = 3001
    api_prefix: str = "/api"
    realtime_path: str = "/ws"

    # CORS settings
    frontend_url: Optional[str] = "http://localhost:5173"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./meme_hustle.db"
    database_password: Optional[SecretStr] = None
    create_tables: bool = False

    # Content generation settings
    llm_api_key: Optional[SecretStr] = Field(
        default=None, validation_alias=AliasChoices("LLM_API_KEY", "GEMINI_API_KEY")
    )
    dspy_model: str = "gemini/gemini-1.5-flash"
    generator_startup_check: bool = True

    # Cache settings
    redis_url: Optional[str] = None
    generation_cache_max_entries: Optional[int] = None

    # Leaderboard settings
    leaderboard_size: int = 10

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: Any) -> Any:
        """Normalize sync driver URLs to their async counterparts."""
        if not v:
            return "sqlite+aiosqlite:///./meme_hustle.db"
        if v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql://", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite:///"):
            return v.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return v

    @field_validator("generation_cache_max_entries", mode="before")
    @classmethod
    def validate_cache_bound(cls, v: Any) -> Any:
        """Treat empty or non-positive bounds as unbounded."""
        if v in (None, ""):
            return None
        return int(v) if int(v) > 0 else None

    @property
    def store_url(self) -> str:
        """Database URL with the configured password applied."""
        if self.database_password is None:
            return self.database_url
        url = make_url(self.database_url).set(
            password=self.database_password.get_secret_value()
        )
        return url.render_as_string(hide_password=False)

    @property
    def cors_origins(self) -> List[str]:
        """Origins allowed for cross-origin HTTP and WebSocket access."""
        origins = list(DEV_ORIGINS)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
