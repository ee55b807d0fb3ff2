"""
Fixtures for sink unit tests.
"""

import pytest

from redis_stream_sink import (
    ComponentContext,
    MessageRef,
    PublishedMessage,
    RecordingMetrics,
    RedisStreamSink,
    RedisStreamSinkSettings,
)
import redis_stream_sink.sink as sink_module


class FakeStreamClient:
    """Stream client double that records appends and fails on request."""

    def __init__(self, fail_at: int | None = None, error: BaseException | None = None):
        self.fail_at = fail_at
        self.error = error
        self.appends = []
        self.initialized = 0
        self.disposed = 0

    async def initialize(self, context):
        self.initialized += 1

    async def dispose(self):
        self.disposed += 1

    async def x_add_object(self, span_context, message_type, stream_name, key, payload):
        if self.fail_at is not None and len(self.appends) + 1 == self.fail_at:
            self.appends.append(None)
            raise self.error
        self.appends.append((span_context, message_type, stream_name, key, payload))
        return f"{len(self.appends)}-0"

    @property
    def streams(self):
        return [a[2] for a in self.appends if a is not None]


def _make_message(n: int, stream_name: str | None = None, **metadata) -> PublishedMessage:
    return PublishedMessage(
        message=MessageRef(type="OrderPlaced", payload={"n": n}),
        span_context={"traceparent": f"00-trace{n}-span{n}-01"},
        metadata=metadata,
        stream_name=stream_name,
    )


@pytest.fixture()
def config():
    return RedisStreamSinkSettings(write_stream="orders")


@pytest.fixture()
def metrics():
    return RecordingMetrics()


@pytest.fixture()
def context(metrics):
    return ComponentContext(metrics=metrics, name="test")


@pytest.fixture()
def fake_client(monkeypatch):
    """FakeStreamClient installed as the sink's client factory."""
    client = FakeStreamClient()
    monkeypatch.setattr(sink_module, "redis_client", lambda cfg: client)
    return client


@pytest.fixture()
async def sink(config, context, fake_client):
    s = RedisStreamSink(config)
    await s.initialize(context)
    yield s
    await s.dispose()


@pytest.fixture()
def make_message():
    return _make_message
