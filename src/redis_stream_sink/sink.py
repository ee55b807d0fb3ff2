"""
Redis stream output sink.

Appends each published message to a Redis stream, one XADD per message in
input order, and reports the outcome of every append as a metric.

Failure handling:
- payload parse failures and aggregate failures cannot succeed on retry;
  the batch is bailed and ``sink()`` returns normally
- anything else is re-raised unchanged for the caller's retry controller

Example:
    sink = RedisStreamSink(RedisStreamSinkSettings(write_stream="orders"))
    await sink.initialize(ComponentContext(metrics=PrometheusMetrics()))
    await sink.sink(iter(messages), RetrierContext())
    await sink.dispose()
"""

from __future__ import annotations

from typing import Iterable, Optional

from loguru import logger

from .client import RedisStreamClient, redis_client
from .config import RedisStreamSinkSettings
from .errors import OtherFailure, SinkNotInitialized, classify_error
from .lifecycle import ComponentContext, Lifecycle, make_lifecycle
from .metrics import MetricsRecorder, RedisMetricResult, RedisMetrics
from .models import (
    OutputSinkConsistencyLevel,
    OutputSinkGuarantees,
    PublishedMessage,
    RedisMetadata,
)
from .retry import RetrierContext


class RedisStreamSink:
    """Output sink writing ``PublishedMessage`` objects to Redis streams."""

    def __init__(
        self,
        config: RedisStreamSinkSettings,
        *,
        context: Optional[ComponentContext] = None,
    ):
        self.config = config
        self.guarantees = OutputSinkGuarantees(
            consistency=OutputSinkConsistencyLevel.NONE,
            idempotent=False,
        )
        self._context = context
        self._client: Optional[Lifecycle[RedisStreamClient]] = None
        self._metrics: Optional[MetricsRecorder] = None

    async def __aenter__(self) -> "RedisStreamSink":
        await self.initialize(self._context or ComponentContext(name="redis-stream-sink"))
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    async def initialize(self, context: ComponentContext) -> None:
        if self._client is not None:
            logger.debug("RedisStreamSink already initialized")
            return
        self._metrics = context.metrics
        self._client = make_lifecycle(redis_client(self.config))
        await self._client.initialize(context)

    async def dispose(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.dispose()

    def resolve_stream(self, msg: PublishedMessage) -> str:
        return msg.destination or self.config.write_stream

    async def sink(self, output: Iterable[PublishedMessage], retry: RetrierContext) -> None:
        if self._client is None or self._metrics is None:
            raise SinkNotInitialized("RedisStreamSink.initialize() must be called before sink()")

        write_stream = self.config.write_stream
        try:
            for msg in output:
                write_stream = self.resolve_stream(msg)

                await self._client.x_add_object(
                    msg.span_context,
                    msg.message.type,
                    write_stream,
                    RedisMetadata.OUTPUT_SINK_STREAM_KEY.value,
                    msg.message.payload,
                )

                self._metrics.increment(
                    RedisMetrics.MSG_PUBLISHED.value,
                    {"stream_name": write_stream, "result": RedisMetricResult.SUCCESS.value},
                )
        except Exception as err:
            self._metrics.increment(
                RedisMetrics.MSG_PUBLISHED.value,
                {"stream_name": write_stream, "result": RedisMetricResult.ERROR.value},
            )

            failure = classify_error(err)
            if isinstance(failure, OtherFailure):
                logger.error(f"Append to stream={write_stream} failed: {type(err).__name__}: {err}")
                raise

            logger.warning(
                f"Bailing batch after non-retryable {type(failure).__name__} "
                f"on stream={write_stream}: {err}"
            )
            retry.bail(err)
