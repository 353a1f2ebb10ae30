"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache), one instance per process
    - Poll periods are positive and the display polls fastest
    - Queue limits for public views are at least 1

Design Decisions:
    - Defaults work out of the box with the docker-compose Postgres
    - Viewer poll periods live here, not in the client, so one deploy can
      retune every dashboard and display at once
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "postgresql+asyncpg://tunely:tunely@db:5432/tunely"
    database_pool_size: int = 20
    database_max_overflow: int = 10

    @field_validator("database_url", mode="before")
    @classmethod
    def use_async_driver(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but the engine needs asyncpg."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # API
    cors_origins: list[str] = ["http://localhost:3000"]
    public_base_url: str = "http://localhost:3000"

    # Viewer polling (server side: period and visible items per role)
    dashboard_poll_seconds: float = Field(5.0, gt=0)
    requester_poll_seconds: float = Field(5.0, gt=0)
    display_poll_seconds: float = Field(3.0, gt=0)
    requester_queue_limit: int = Field(3, ge=1)
    display_queue_limit: int = Field(5, ge=1)

    # Viewer polling (client side: ViewPoller retry policy)
    view_poll_max_failures: int = Field(5, ge=0)
    view_poll_base_delay_ms: int = Field(1000, gt=0)
    view_poll_max_delay_ms: int = Field(30_000, gt=0)

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @model_validator(mode="after")
    def display_polls_fastest(self) -> "Settings":
        fastest_other = min(self.dashboard_poll_seconds, self.requester_poll_seconds)
        if self.display_poll_seconds > fastest_other:
            raise ValueError(
                "display_poll_seconds must not exceed the dashboard or requester period",
            )
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
