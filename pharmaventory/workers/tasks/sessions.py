"""Celery tasks for chat session housekeeping."""

import asyncio
import logging
from typing import Any

import redis.asyncio as aioredis

from pharmaventory.core.config import settings
from pharmaventory.services.session_store import RedisSessionStore
from pharmaventory.workers.celery_app import BaseTask, celery_app

logger = logging.getLogger(__name__)


@celery_app.task(  # type: ignore[untyped-decorator]
    name="tasks.sessions.evict_idle",
    base=BaseTask,
    bind=True,
)
def evict_idle_sessions(self: BaseTask, max_age_seconds: float | None = None) -> dict[str, Any]:  # noqa: ARG001
    """Delete Redis chat sessions idle for longer than ``max_age_seconds``.

    Only meaningful for the redis session backend; in-memory sessions are
    evicted by the API process itself.

    Args:
        max_age_seconds: Idle threshold, defaults to ``session_idle_seconds``

    Returns:
        Dict with the number of evicted sessions
    """
    max_age = max_age_seconds if max_age_seconds is not None else settings.session_idle_seconds

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    try:
        evicted = loop.run_until_complete(_evict_idle_sessions_async(max_age))
        return {"evicted": evicted, "max_age_seconds": max_age}
    finally:
        loop.close()


async def _evict_idle_sessions_async(max_age_seconds: float) -> int:
    client = aioredis.from_url(str(settings.redis_url), decode_responses=True)
    try:
        store = RedisSessionStore(client, max_turns=settings.session_max_turns)
        return await store.evict_idle(max_age_seconds)
    finally:
        await client.aclose()
