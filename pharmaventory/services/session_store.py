"""Chat session storage with per-session atomic updates.

Two backends share the ``SessionStore`` interface:

- ``InMemorySessionStore``: process-local dict guarded by one asyncio lock per
  session id.
- ``RedisSessionStore``: JSON documents in Redis, updated with WATCH/MULTI so
  concurrent appends to the same session retry instead of losing turns.

Neither backend evicts on its own; ``evict_idle`` must be called periodically
(see ``pharmaventory.workers.tasks.sessions`` and the app lifespan).
"""

import asyncio
import enum
import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

import redis.asyncio as aioredis
from pydantic import BaseModel, Field
from redis.exceptions import WatchError

from pharmaventory.core.config import Settings, settings

logger = logging.getLogger(__name__)

MAX_SESSION_TURNS = 20
REDIS_KEY_PREFIX = "chat:session:"
MAX_WATCH_RETRIES = 5


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionConflictError(Exception):
    """Raised when a session update loses the optimistic-lock race too many times."""


class TurnRole(str, enum.Enum):
    """Who produced a conversation turn."""

    USER = "user"
    BOT = "bot"


class ChatTurn(BaseModel):
    role: TurnRole
    text: str


class ChatSession(BaseModel):
    """Conversation state for one session id.

    ``preferences`` is reserved scratch space and is not read by the chatbot yet.
    """

    session_id: str
    turns: list[ChatTurn] = Field(default_factory=list)
    last_intent: str | None = None
    preferences: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)
    last_activity: datetime = Field(default_factory=_utcnow)

    def append_turn(
        self, role: TurnRole, text: str, max_turns: int = MAX_SESSION_TURNS
    ) -> None:
        """Append a turn in place, dropping the oldest turns beyond ``max_turns``."""
        self.turns.append(ChatTurn(role=role, text=text))
        if len(self.turns) > max_turns:
            del self.turns[: len(self.turns) - max_turns]
        self.last_activity = _utcnow()

    def recent_turns(self, count: int) -> list[ChatTurn]:
        return list(self.turns[-count:]) if count > 0 else []

    def is_idle(self, max_age: timedelta, now: datetime) -> bool:
        return now - self.last_activity > max_age


class SessionStore(Protocol):
    """Keyed session storage; every operation is atomic per session id."""

    async def get_or_create(self, session_id: str) -> ChatSession: ...

    async def append_turns(
        self,
        session_id: str,
        turns: Iterable[tuple[TurnRole, str]],
        last_intent: str | None = None,
    ) -> ChatSession: ...

    async def clear(self, session_id: str) -> bool: ...

    async def evict_idle(self, max_age_seconds: float) -> int: ...


class InMemorySessionStore:
    """Process-local session store with one lock per session id."""

    def __init__(self, max_turns: int = MAX_SESSION_TURNS) -> None:
        self.max_turns = max_turns
        self._sessions: dict[str, ChatSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        return self._locks.setdefault(session_id, asyncio.Lock())

    def __len__(self) -> int:
        return len(self._sessions)

    async def get_or_create(self, session_id: str) -> ChatSession:
        """Return a copy of the session, creating an empty one if absent."""
        async with self._lock_for(session_id):
            session = self._sessions.get(session_id)
            if session is None:
                session = ChatSession(session_id=session_id)
                self._sessions[session_id] = session
            return session.model_copy(deep=True)

    async def append_turns(
        self,
        session_id: str,
        turns: Iterable[tuple[TurnRole, str]],
        last_intent: str | None = None,
    ) -> ChatSession:
        async with self._lock_for(session_id):
            session = self._sessions.get(session_id)
            if session is None:
                session = ChatSession(session_id=session_id)
                self._sessions[session_id] = session
            for role, text in turns:
                session.append_turn(role, text, max_turns=self.max_turns)
            if last_intent is not None:
                session.last_intent = last_intent
            return session.model_copy(deep=True)

    async def clear(self, session_id: str) -> bool:
        async with self._lock_for(session_id):
            existed = self._sessions.pop(session_id, None) is not None
        self._locks.pop(session_id, None)
        return existed

    async def evict_idle(self, max_age_seconds: float) -> int:
        """Drop sessions idle for longer than ``max_age_seconds``."""
        max_age = timedelta(seconds=max_age_seconds)
        evicted = 0

        for session_id in list(self._sessions):
            lock = self._lock_for(session_id)
            if lock.locked():
                continue
            async with lock:
                session = self._sessions.get(session_id)
                if session is not None and session.is_idle(max_age, _utcnow()):
                    del self._sessions[session_id]
                    evicted += 1
            if session_id not in self._sessions:
                self._locks.pop(session_id, None)

        if evicted:
            logger.info("Evicted %d idle chat sessions", evicted)
        return evicted


class RedisSessionStore:
    """Redis-backed session store shared by every API process."""

    def __init__(
        self,
        client: aioredis.Redis,
        max_turns: int = MAX_SESSION_TURNS,
        ttl_seconds: int | None = None,
        key_prefix: str = REDIS_KEY_PREFIX,
        max_watch_retries: int = MAX_WATCH_RETRIES,
    ) -> None:
        self.client = client
        self.max_turns = max_turns
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self.max_watch_retries = max_watch_retries

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    async def get_or_create(self, session_id: str) -> ChatSession:
        key = self._key(session_id)
        raw = await self.client.get(key)
        if raw is not None:
            return ChatSession.model_validate_json(raw)

        session = ChatSession(session_id=session_id)
        created = await self.client.set(
            key, session.model_dump_json(), nx=True, ex=self.ttl_seconds
        )
        if created:
            return session

        # Another request created it first
        raw = await self.client.get(key)
        return ChatSession.model_validate_json(raw) if raw is not None else session

    async def append_turns(
        self,
        session_id: str,
        turns: Iterable[tuple[TurnRole, str]],
        last_intent: str | None = None,
    ) -> ChatSession:
        key = self._key(session_id)
        pending = list(turns)

        async with self.client.pipeline(transaction=True) as pipe:
            for _ in range(self.max_watch_retries):
                try:
                    await pipe.watch(key)
                    raw = await pipe.get(key)
                    session = (
                        ChatSession.model_validate_json(raw)
                        if raw is not None
                        else ChatSession(session_id=session_id)
                    )
                    for role, text in pending:
                        session.append_turn(role, text, max_turns=self.max_turns)
                    if last_intent is not None:
                        session.last_intent = last_intent

                    pipe.multi()
                    pipe.set(key, session.model_dump_json(), ex=self.ttl_seconds)
                    await pipe.execute()
                    return session
                except WatchError:
                    logger.debug("Concurrent update to session %s, retrying", session_id)
                    continue

        raise SessionConflictError(
            f"Session {session_id} kept changing after {self.max_watch_retries} attempts"
        )

    async def clear(self, session_id: str) -> bool:
        return bool(await self.client.delete(self._key(session_id)))

    async def evict_idle(self, max_age_seconds: float) -> int:
        """Delete sessions idle for longer than ``max_age_seconds``.

        A session touched between the read and the delete is left alone.
        """
        max_age = timedelta(seconds=max_age_seconds)
        evicted = 0

        async for key in self.client.scan_iter(match=f"{self.key_prefix}*"):
            async with self.client.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(key)
                    raw = await pipe.get(key)
                    if raw is None:
                        continue
                    session = ChatSession.model_validate_json(raw)
                    if not session.is_idle(max_age, _utcnow()):
                        continue
                    pipe.multi()
                    pipe.delete(key)
                    await pipe.execute()
                    evicted += 1
                except WatchError:
                    continue

        if evicted:
            logger.info("Evicted %d idle chat sessions from redis", evicted)
        return evicted


def build_session_store(
    config: Settings = settings, client: aioredis.Redis | None = None
) -> SessionStore:
    """Create the session store selected by ``session_backend``."""
    if config.session_backend == "redis":
        redis_client = client or aioredis.from_url(str(config.redis_url), decode_responses=True)
        return RedisSessionStore(
            redis_client,
            max_turns=config.session_max_turns,
            ttl_seconds=config.session_idle_seconds,
        )
    return InMemorySessionStore(max_turns=config.session_max_turns)
