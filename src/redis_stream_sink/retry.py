"""
Retry context handed to sinks, and a reference retry controller.

Sinks only call ``RetrierContext.bail(err)``; attempt counting and backoff
belong to ``Retrier``.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from loguru import logger

from .errors import BailedError

R = TypeVar("R")


@dataclass
class RetryPolicy:
    max_attempts: int = 5
    initial_backoff_ms: int = 50
    max_backoff_ms: int = 2000
    backoff_multiplier: float = 2.0
    jitter: bool = True

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def next_backoff_ms(self, attempt: int) -> int:
        """Backoff before retry number ``attempt`` (1-based)."""
        base = self.initial_backoff_ms * (self.backoff_multiplier ** max(0, attempt - 1))
        delay = min(int(base), self.max_backoff_ms)
        if self.jitter:
            # 50-100% of the computed delay
            delay = int(delay * random.uniform(0.5, 1.0))
        return delay


class RetrierContext:
    """Per-attempt handle passed to the operation being retried."""

    def __init__(self, attempt: int = 1, max_attempts: int = 1):
        self.attempt = attempt
        self.max_attempts = max_attempts
        self.bailed = False
        self.bail_reason: Optional[BaseException] = None

    @property
    def is_final_attempt(self) -> bool:
        return self.attempt >= self.max_attempts

    def bail(self, err: BaseException) -> None:
        """Stop retrying the current operation."""
        self.bailed = True
        self.bail_reason = err


class Retrier:
    """Runs an async operation until it succeeds, bails or runs out of attempts."""

    def __init__(self, policy: Optional[RetryPolicy] = None):
        self.policy = policy or RetryPolicy()

    async def run(self, fn: Callable[[RetrierContext], Awaitable[R]]) -> R:
        attempt = 1
        while True:
            ctx = RetrierContext(attempt=attempt, max_attempts=self.policy.max_attempts)
            try:
                result = await fn(ctx)
            except Exception as exc:
                if ctx.bailed:
                    raise BailedError(str(ctx.bail_reason or exc)) from exc
                if ctx.is_final_attempt:
                    logger.error(f"Giving up after {attempt} attempt(s): {type(exc).__name__}: {exc}")
                    raise
                delay_ms = self.policy.next_backoff_ms(attempt)
                logger.warning(
                    f"Attempt {attempt}/{self.policy.max_attempts} failed "
                    f"({type(exc).__name__}: {exc}); retrying in {delay_ms}ms"
                )
                await asyncio.sleep(delay_ms / 1000.0)
                attempt += 1
                continue

            if ctx.bailed:
                raise BailedError(str(ctx.bail_reason)) from ctx.bail_reason
            return result
