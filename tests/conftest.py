"""
Pytest configuration and fixtures for redis-stream-sink.

Provides cross-platform event loop configuration.
"""

import asyncio
import sys

# Set policy *before* pytest-asyncio creates any loops
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
