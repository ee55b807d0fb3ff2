"""
Redis Stream Sink

Output sink that appends published messages to Redis streams, reports
per-message outcome metrics and classifies failures for a retry controller.

Usage:
    from redis_stream_sink import RedisStreamSink, RedisStreamSinkSettings

    async with RedisStreamSink(RedisStreamSinkSettings(write_stream="orders")) as sink:
        await sink.sink(iter(messages), RetrierContext())
"""

from .client import RedisStreamClient, redis_client
from .config import RedisStreamSinkSettings, get_settings
from .errors import (
    AggregateFailure,
    AggregateStreamError,
    BailedError,
    OtherFailure,
    ParseFailure,
    PayloadParseError,
    SinkNotInitialized,
    StreamSinkError,
    classify_error,
)
from .lifecycle import ComponentContext, Disposable, Initializable, Lifecycle, make_lifecycle
from .metrics import (
    MetricsRecorder,
    PrometheusMetrics,
    RecordingMetrics,
    RedisMetricResult,
    RedisMetrics,
)
from .models import (
    MessageRef,
    OutputSinkConsistencyLevel,
    OutputSinkGuarantees,
    PublishedMessage,
    RedisMetadata,
    RedisStreamMetadata,
)
from .retry import Retrier, RetrierContext, RetryPolicy
from .sink import RedisStreamSink

__version__ = "1.0.0"
__all__ = [
    # sink
    "RedisStreamSink",
    "RedisStreamSinkSettings",
    "get_settings",
    # client
    "RedisStreamClient",
    "redis_client",
    # models
    "MessageRef",
    "PublishedMessage",
    "OutputSinkGuarantees",
    "OutputSinkConsistencyLevel",
    "RedisMetadata",
    "RedisStreamMetadata",
    # errors
    "StreamSinkError",
    "PayloadParseError",
    "AggregateStreamError",
    "SinkNotInitialized",
    "BailedError",
    "ParseFailure",
    "AggregateFailure",
    "OtherFailure",
    "classify_error",
    # lifecycle
    "ComponentContext",
    "Initializable",
    "Disposable",
    "Lifecycle",
    "make_lifecycle",
    # metrics
    "MetricsRecorder",
    "PrometheusMetrics",
    "RecordingMetrics",
    "RedisMetrics",
    "RedisMetricResult",
    # retry
    "RetryPolicy",
    "Retrier",
    "RetrierContext",
]
