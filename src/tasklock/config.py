from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TASKLOCK_", env_file=".env", extra="ignore")

    # Redis
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    redis_socket_timeout: float = Field(default=5.0, validation_alias="REDIS_SOCKET_TIMEOUT")

    # Lock keys: {key_prefix}{key_separator}{task}{key_separator}{identifier}
    key_prefix: str = "lock"
    key_separator: str = ":"
    identifier_separator: str = "-"

    # Seconds a lock may be held; 0 or below holds until released
    default_lock_timeout: int = 0

    # Observability
    log_level: str = "INFO"
    log_json: bool = True


settings = Settings()
