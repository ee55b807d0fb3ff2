"""
Demo script for RedisStreamSink.

Publishes a small batch (one message routed by override) through the
reference Retrier. Requires a Redis at REDIS_SINK_URL or localhost:6379.
"""

import asyncio

from loguru import logger

from redis_stream_sink import (
    BailedError,
    ComponentContext,
    MessageRef,
    PrometheusMetrics,
    PublishedMessage,
    RedisStreamSink,
    Retrier,
    RetryPolicy,
    get_settings,
)


async def main():
    cfg = get_settings()
    messages = [
        PublishedMessage(message=MessageRef(type="OrderPlaced", payload={"order_id": i}))
        for i in range(3)
    ]
    messages.append(
        PublishedMessage(
            message=MessageRef(type="OrderPlaced", payload={"order_id": 99, "rush": True}),
            stream_name=f"priority-{cfg.write_stream}",
        )
    )

    sink = RedisStreamSink(cfg, context=ComponentContext(metrics=PrometheusMetrics(), name="demo"))
    retrier = Retrier(RetryPolicy(max_attempts=3, initial_backoff_ms=100))

    async with sink:
        logger.info(f"🚀 Publishing {len(messages)} messages (default stream={cfg.write_stream})")
        try:
            await retrier.run(lambda ctx: sink.sink(iter(messages), ctx))
        except BailedError as exc:
            logger.warning(f"Batch bailed: {exc}")
            return

    logger.info("✅ Sink demo complete")


if __name__ == "__main__":
    asyncio.run(main())
