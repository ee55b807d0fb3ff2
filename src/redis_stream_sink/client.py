from __future__ import annotations

import json
from typing import Any, Mapping, Optional

import redis.asyncio as aioredis
from loguru import logger

from .config import RedisStreamSinkSettings
from .errors import PayloadParseError
from .lifecycle import ComponentContext

TYPE_FIELD = "type"
TRACE_PREFIX = "trace."


def encode_payload(payload: Any) -> str:
    """JSON-encode a payload; unencodable payloads raise PayloadParseError."""
    try:
        return json.dumps(payload, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise PayloadParseError(f"Cannot encode payload: {exc}") from exc


def build_fields(
    span_context: Mapping[str, str], message_type: str, key: str, payload: Any
) -> dict[str, str]:
    fields = {f"{TRACE_PREFIX}{k}": str(v) for k, v in (span_context or {}).items()}
    fields[TYPE_FIELD] = message_type
    fields[key] = encode_payload(payload)
    return fields


class RedisStreamClient:
    """Async Redis client that appends structured records to streams.

    Implements ``Initializable`` / ``Disposable``; the connection is created in
    ``initialize`` and closed in ``dispose``.
    """

    def __init__(self, cfg: RedisStreamSinkSettings, redis: Optional[aioredis.Redis] = None):
        self.cfg = cfg
        self._redis = redis

    @property
    def connected(self) -> bool:
        return self._redis is not None

    def _connect(self) -> aioredis.Redis:
        kwargs = self.cfg.connection_kwargs()
        if self.cfg.url:
            return aioredis.Redis.from_url(self.cfg.url, decode_responses=True, **kwargs)
        return aioredis.Redis(decode_responses=True, **kwargs)

    async def initialize(self, context: ComponentContext) -> None:
        if self._redis is None:
            self._redis = self._connect()
        await self._redis.ping()
        logger.info(f"Redis stream client connected ({context.name})")

    async def dispose(self) -> None:
        if self._redis is None:
            return
        await self._redis.aclose()
        self._redis = None
        logger.info("Redis stream client closed")

    async def ping(self) -> bool:
        if self._redis is None:
            self._redis = self._connect()
        return bool(await self._redis.ping())

    async def x_add_object(
        self,
        span_context: Mapping[str, str],
        message_type: str,
        stream_name: str,
        key: str,
        payload: Any,
    ) -> str:
        """XADD one entry to ``stream_name`` and return the entry id."""
        if self._redis is None:
            raise RuntimeError("RedisStreamClient is not initialized")
        fields = build_fields(span_context, message_type, key, payload)
        kwargs: dict[str, Any] = {}
        if self.cfg.max_stream_length:
            kwargs.update(maxlen=self.cfg.max_stream_length, approximate=True)
        entry_id = await self._redis.xadd(stream_name, fields, **kwargs)
        if isinstance(entry_id, bytes):
            entry_id = entry_id.decode()
        logger.debug(f"XADD stream={stream_name} type={message_type} id={entry_id}")
        return entry_id


def redis_client(cfg: RedisStreamSinkSettings) -> RedisStreamClient:
    return RedisStreamClient(cfg)
