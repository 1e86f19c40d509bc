"""Integration fixtures — Redis is flushed around every test."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
async def clean_redis(redis_client):
    """Flush Redis between tests."""
    await redis_client.flushdb()
    yield
    await redis_client.flushdb()
