"""Service configuration loaded from the environment."""

from functools import lru_cache
from typing import Literal, Self

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings.

    Every field can be set through a ``DINO_``-prefixed environment variable or a
    ``.env`` file. The database URL is also read from a plain ``DATABASE_URL``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DINO_", env_file=".env", extra="ignore", populate_by_name=True
    )

    backend: Literal["memory", "sqlalchemy"] = "memory"

    database_url: str | None = Field(
        default=None, validation_alias=AliasChoices("DINO_DATABASE_URL", "DATABASE_URL")
    )
    db_echo: bool = False
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)
    db_pool_timeout: float = Field(default=30.0, gt=0)
    create_schema: bool = False

    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"

    @model_validator(mode="after")
    def check_database_url(self) -> Self:
        if self.backend == "sqlalchemy" and not self.database_url:
            msg = (
                "database_url (DINO_DATABASE_URL or DATABASE_URL) "
                "is required for the sqlalchemy backend"
            )
            raise ValueError(msg)
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
