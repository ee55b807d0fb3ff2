from functools import lru_cache
from typing import Any, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisStreamSinkSettings(BaseSettings):
    """Connection and routing settings for the Redis stream sink.

    Read from ``REDIS_SINK_*`` environment variables (or ``.env``).
    ``url`` takes precedence over host/port/db when set.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_SINK_",
        env_file=".env",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    write_stream: str = "events"
    url: Optional[str] = None
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: Optional[float] = 5.0
    max_stream_length: Optional[int] = None

    @field_validator("write_stream")
    def _validate_stream(cls, v):
        if not v or not v.strip():
            raise ValueError("write_stream must be non-empty")
        return v

    @field_validator("max_stream_length")
    def _validate_maxlen(cls, v):
        if v is not None and v <= 0:
            raise ValueError("max_stream_length must be > 0")
        return v

    def connection_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"socket_timeout": self.socket_timeout}
        if self.password:
            kwargs["password"] = self.password
        if self.url:
            return kwargs
        kwargs.update(host=self.host, port=self.port, db=self.db)
        return kwargs


@lru_cache()
def get_settings() -> RedisStreamSinkSettings:
    return RedisStreamSinkSettings()
