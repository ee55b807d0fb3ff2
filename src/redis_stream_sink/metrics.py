"""
Metrics for the Redis stream sink.

Counters are registered in the Prometheus global REGISTRY at import time.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, Protocol

from prometheus_client import Counter


class RedisMetrics(str, Enum):
    MSG_PUBLISHED = "redis_msg_published"


class RedisMetricResult(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


REDIS_MSG_PUBLISHED = Counter(
    RedisMetrics.MSG_PUBLISHED.value,
    "Messages appended to Redis streams by the output sink",
    ["stream_name", "result"],
)


class MetricsRecorder(Protocol):
    """Counter sink used by components to report outcomes."""

    def increment(self, key: str, tags: Mapping[str, str] | None = None) -> None: ...


def _label(v) -> str:
    return v.value if isinstance(v, Enum) else str(v)


class PrometheusMetrics:
    """MetricsRecorder backed by prometheus_client counters."""

    def __init__(self) -> None:
        self._counters: dict[str, Counter] = {
            RedisMetrics.MSG_PUBLISHED.value: REDIS_MSG_PUBLISHED,
        }

    def increment(self, key: str, tags: Mapping[str, str] | None = None) -> None:
        counter = self._counters.get(_label(key))
        if counter is None:
            raise KeyError(f"Unknown counter: {_label(key)}")
        labels = {k: _label(v) for k, v in (tags or {}).items()}
        counter.labels(**labels).inc()


class RecordingMetrics:
    """In-memory recorder; keeps every increment in call order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, str]]] = []

    def increment(self, key: str, tags: Mapping[str, str] | None = None) -> None:
        self.events.append((_label(key), {k: _label(v) for k, v in (tags or {}).items()}))
