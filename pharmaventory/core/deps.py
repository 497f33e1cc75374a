"""Dependency injection for FastAPI routes."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

import redis.asyncio as aioredis
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

# Re-export auth dependencies for convenience
from pharmaventory.core.auth import CurrentUser, get_current_user
from pharmaventory.core.config import settings
from pharmaventory.core.database import get_async_session
from pharmaventory.services.chat_service import ChatService
from pharmaventory.services.chatbot.completion_client import RemoteCompletionClient
from pharmaventory.services.chatbot.vocabulary import Vocabulary
from pharmaventory.services.inventory_repository import InventoryRepository
from pharmaventory.services.session_store import SessionStore, build_session_store


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Alias for get_async_session for backwards compatibility."""
    async for session in get_async_session():
        yield session


# Shared Redis connection pool
_redis_pool: aioredis.ConnectionPool | None = None


def _get_redis_pool() -> aioredis.ConnectionPool:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.ConnectionPool.from_url(
            str(settings.redis_url), decode_responses=True
        )
    return _redis_pool


def get_redis_client() -> aioredis.Redis:
    """Return a Redis client bound to the shared connection pool."""
    return aioredis.Redis(connection_pool=_get_redis_pool())


@lru_cache
def get_session_store() -> SessionStore:
    """Process-wide session store selected by ``session_backend``."""
    client = get_redis_client() if settings.session_backend == "redis" else None
    return build_session_store(settings, client=client)


@lru_cache
def get_completion_client() -> RemoteCompletionClient | None:
    """Remote completion client, or None when no API key is configured."""
    if not settings.remote_chat_enabled:
        return None
    return RemoteCompletionClient.from_settings(settings)


@lru_cache
def get_vocabulary() -> Vocabulary:
    return Vocabulary.from_settings(settings)


# Database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


async def get_chat_service(db: DBSession) -> ChatService:
    """Build a chat service bound to this request's database session."""
    return ChatService(
        data_source=InventoryRepository(db),
        session_store=get_session_store(),
        completion_client=get_completion_client(),
        vocabulary=get_vocabulary(),
        history_turns=settings.chat_history_turns,
    )


ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]


__all__ = [
    "ChatServiceDep",
    "CurrentUser",
    "DBSession",
    "get_chat_service",
    "get_completion_client",
    "get_current_user",
    "get_db",
    "get_redis_client",
    "get_session_store",
    "get_vocabulary",
]
