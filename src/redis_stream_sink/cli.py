from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Iterator, Optional

import typer
from loguru import logger
from pydantic import ValidationError

from .client import RedisStreamClient
from .config import RedisStreamSinkSettings, get_settings
from .errors import BailedError
from .lifecycle import ComponentContext
from .metrics import PrometheusMetrics
from .models import PublishedMessage
from .retry import Retrier, RetryPolicy
from .sink import RedisStreamSink

app = typer.Typer(help="Redis stream sink operational CLI")

# ---------------------------
# Common options
# ---------------------------


def url_opt() -> Optional[str]:
    return typer.Option(None, "--url", envvar="REDIS_SINK_URL", help="Redis URL")


def _settings(url: Optional[str], stream: Optional[str] = None) -> RedisStreamSinkSettings:
    overrides = {}
    if url:
        overrides["url"] = url
    if stream:
        overrides["write_stream"] = stream
    if not overrides:
        return get_settings()
    return RedisStreamSinkSettings(**{**get_settings().model_dump(), **overrides})


def iter_ndjson(path: str) -> Iterator[dict]:
    fh = sys.stdin if path == "-" else open(Path(path), "r", encoding="utf-8")
    try:
        for lineno, line in enumerate(fh, 1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as exc:
                raise typer.BadParameter(f"line {lineno}: invalid JSON ({exc.msg})")
    finally:
        if fh is not sys.stdin:
            fh.close()


# ---------------------------
# Commands
# ---------------------------


@app.command("ping")
def ping(url: Optional[str] = url_opt()):
    async def _run() -> bool:
        client = RedisStreamClient(_settings(url))
        try:
            return await client.ping()
        finally:
            await client.dispose()

    ok = asyncio.run(_run())
    typer.echo(json.dumps({"ok": ok}, indent=2))


@app.command("publish")
def publish(
    file: str = typer.Argument(..., help="NDJSON file of messages ('-' for stdin)"),
    stream: Optional[str] = typer.Option(None, "--stream", help="Default stream name"),
    max_attempts: int = typer.Option(3, "--max-attempts", min=1, help="Retry attempts per batch"),
    url: Optional[str] = url_opt(),
):
    """Publish NDJSON messages to Redis streams through the output sink."""
    try:
        messages = [PublishedMessage.model_validate(row) for row in iter_ndjson(file)]
    except ValidationError as exc:
        logger.error(f"Invalid message: {exc}")
        raise typer.Exit(code=1)
    except typer.BadParameter as exc:
        logger.error(f"Invalid input: {exc.message}")
        raise typer.Exit(code=1)
    except OSError as exc:
        logger.error(f"Cannot read {file}: {exc}")
        raise typer.Exit(code=1)

    cfg = _settings(url, stream)

    async def _run() -> bool:
        sink = RedisStreamSink(cfg, context=ComponentContext(metrics=PrometheusMetrics(), name="cli"))
        retrier = Retrier(RetryPolicy(max_attempts=max_attempts))
        async with sink:
            try:
                await retrier.run(lambda ctx: sink.sink(iter(messages), ctx))
            except BailedError as exc:
                logger.warning(f"Batch bailed: {exc}")
                return True
        return False

    bailed = asyncio.run(_run())
    if not bailed:
        logger.success(f"Published {len(messages)} message(s)")
    typer.echo(json.dumps({"messages": len(messages), "bailed": bailed}))
    if bailed:
        raise typer.Exit(code=2)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
