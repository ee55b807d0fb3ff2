"""
Pydantic data models for the Redis stream sink.

Messages are produced upstream and only read by the sink.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RedisStreamMetadata(str, Enum):
    """Well-known message metadata keys."""

    STREAM_NAME = "redis.stream"


class RedisMetadata(str, Enum):
    """Field keys written into stream entries."""

    OUTPUT_SINK_STREAM_KEY = "redis.stream.key"


class OutputSinkConsistencyLevel(str, Enum):
    NONE = "none"
    ATOMIC = "atomic"
    EXACTLY_ONCE = "exactly_once"


@dataclass(frozen=True)
class OutputSinkGuarantees:
    """Delivery semantics advertised by a sink."""

    consistency: OutputSinkConsistencyLevel
    idempotent: bool


class MessageRef(BaseModel):
    """Typed message body."""

    model_config = ConfigDict(frozen=True)

    type: str
    payload: Any = None

    @field_validator("type")
    def _non_empty_type(cls, v):
        if not v or not v.strip():
            raise ValueError("message type must be non-empty")
        return v


class PublishedMessage(BaseModel):
    """A message ready to be handed to an output sink.

    ``stream_name`` overrides the sink's default stream. Producers that only
    fill ``metadata`` can still route with the ``redis.stream`` key.
    """

    model_config = ConfigDict(frozen=True)

    message: MessageRef
    span_context: dict[str, str] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    stream_name: Optional[str] = None

    @property
    def destination(self) -> str | None:
        if self.stream_name:
            return self.stream_name
        return self.metadata.get(RedisStreamMetadata.STREAM_NAME.value) or None
