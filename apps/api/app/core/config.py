"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    token_secret: str = Field(min_length=32)
    token_key_id: str = Field(default="v1", min_length=1)
    # Retired signing keys by kid; still accepted for verification.
    token_retired_keys: dict[str, str] = Field(default_factory=dict)
    database_path: str | None = None
    hide_foreign_resources: bool = False
    password_hash_rounds: int | None = Field(default=None, ge=1)

    model_config = SettingsConfigDict(env_prefix="EVENTHUB_", extra="ignore")

    def signing_keys(self) -> dict[str, str]:
        keys = dict(self.token_retired_keys)
        keys[self.token_key_id] = self.token_secret
        return keys


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
