"""
Exceptions and error classification for the Redis stream sink.

Append failures are mapped onto a small tagged variant so the publish loop
can decide between bailing the batch and handing the error to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from redis.exceptions import DataError, ExecAbortError, InvalidResponse


class StreamSinkError(Exception):
    """Base error for the Redis stream sink."""

    pass


class PayloadParseError(StreamSinkError):
    """Payload could not be encoded into (or decoded from) a stream entry."""

    pass


class AggregateStreamError(StreamSinkError):
    """Several underlying failures reported for a single operation."""

    def __init__(self, message: str, errors: Sequence[BaseException] = ()):
        super().__init__(message)
        self.errors = list(errors)


class SinkNotInitialized(StreamSinkError, RuntimeError):
    """Sink used before ``initialize()`` completed."""

    pass


class BailedError(StreamSinkError):
    """Retrier stopped because the batch was bailed."""

    pass


@dataclass(frozen=True)
class ParseFailure:
    error: BaseException
    is_retryable = False


@dataclass(frozen=True)
class AggregateFailure:
    error: BaseException
    is_retryable = False


@dataclass(frozen=True)
class OtherFailure:
    error: BaseException
    is_retryable = True


ErrorClass = Union[ParseFailure, AggregateFailure, OtherFailure]


def classify_error(e: BaseException) -> ErrorClass:
    if isinstance(e, (PayloadParseError, InvalidResponse, DataError)):
        return ParseFailure(e)
    if isinstance(e, (AggregateStreamError, ExceptionGroup, ExecAbortError)):
        return AggregateFailure(e)
    return OtherFailure(e)
