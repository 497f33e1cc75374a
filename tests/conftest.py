"""Pytest configuration and fixtures for the Pharmaventory test suite.

Provides:
- In-memory inventory data source (no database needed)
- Medicine and reorder record factories
- Fixed clock for date-sensitive assertions
- Mock Redis (fakeredis)
- Signed test JWTs and disabled rate limiting
- API clients with the chat service and database overridden
"""

from collections.abc import AsyncGenerator, Callable, Generator, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import fakeredis.aioredis
import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from pharmaventory.core.config import settings
from pharmaventory.core.deps import get_chat_service, get_db
from pharmaventory.core.rate_limit import limiter
from pharmaventory.main import app
from pharmaventory.services.chat_service import ChatService
from pharmaventory.services.chatbot.vocabulary import Vocabulary
from pharmaventory.services.inventory_repository import (
    SEARCHABLE_FIELDS,
    MedicineRecord,
    ReorderRecord,
)
from pharmaventory.services.session_store import InMemorySessionStore

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
TEST_USER_ID = "pharmacist-1"
FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

# ---------------------------------------------------------------------------
# Disable rate limiting globally for tests
# ---------------------------------------------------------------------------
limiter.enabled = False


# ---------------------------------------------------------------------------
# In-memory inventory
# ---------------------------------------------------------------------------


class FakeInventory:
    """InventoryDataSource over plain lists, mirroring the repository's filters."""

    def __init__(
        self,
        medicines: Sequence[MedicineRecord] = (),
        reorders: Sequence[ReorderRecord] = (),
    ) -> None:
        self.medicines = list(medicines)
        self.reorders = list(reorders)
        self.error: Exception | None = None
        self.medicine_calls: list[dict[str, Any]] = []
        self.reorder_calls = 0

    async def list_medicines(
        self,
        search: str | None = None,
        fields: Sequence[str] = ("name", "generic_name"),
        limit: int | None = None,
        order_by: str = "name",
    ) -> list[MedicineRecord]:
        self.medicine_calls.append(
            {"search": search, "fields": tuple(fields), "limit": limit, "order_by": order_by}
        )
        if self.error is not None:
            raise self.error

        rows = list(self.medicines)
        if search:
            term = search.lower()
            searched = [f for f in fields if f in SEARCHABLE_FIELDS]
            rows = [m for m in rows if any(term in getattr(m, f).lower() for f in searched)]

        if order_by == "expiry_date":
            rows.sort(key=lambda m: m.expiry_date)
        else:
            rows.sort(key=lambda m: m.name)

        return rows[:limit] if limit is not None else rows

    async def list_pending_reorders(self, limit: int = 10) -> list[ReorderRecord]:
        self.reorder_calls += 1
        if self.error is not None:
            raise self.error
        pending = [r for r in self.reorders if r.status == "pending"]
        pending.sort(key=lambda r: r.created_at, reverse=True)
        return pending[:limit]


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def medicine_factory() -> Callable[..., MedicineRecord]:
    """Factory for MedicineRecord with sensible, well-stocked defaults."""

    def _create(
        *,
        name: str = "Dolo 650",
        generic_name: str = "Paracetamol",
        category: str = "Analgesic",
        manufacturer: str = "Micro Labs",
        quantity: int = 200,
        unit: str = "tablets",
        reorder_level: int = 50,
        unit_price: float = 2.0,
        batch_number: str = "B-001",
        expiry_days: float = 365,
        location: str = "Rack A1",
    ) -> MedicineRecord:
        return MedicineRecord(
            name=name,
            generic_name=generic_name,
            category=category,
            manufacturer=manufacturer,
            quantity=quantity,
            unit=unit,
            reorder_level=reorder_level,
            unit_price=unit_price,
            batch_number=batch_number,
            expiry_date=FIXED_NOW + timedelta(days=expiry_days),
            location=location,
        )

    return _create


@pytest.fixture
def reorder_factory() -> Callable[..., ReorderRecord]:
    """Factory for ReorderRecord."""

    def _create(
        *,
        medicine_name: str = "Amoxil 500",
        current_quantity: int = 10,
        requested_quantity: int = 150,
        status: str = "pending",
        requested_by: str = "pharmacist@example.com",
        age_hours: float = 1,
    ) -> ReorderRecord:
        return ReorderRecord(
            medicine_id=uuid4(),
            medicine_name=medicine_name,
            current_quantity=current_quantity,
            requested_quantity=requested_quantity,
            status=status,
            requested_by=requested_by,
            created_at=FIXED_NOW - timedelta(hours=age_hours),
        )

    return _create


@pytest.fixture
def sample_inventory(medicine_factory: Callable[..., MedicineRecord]) -> FakeInventory:
    """A small inventory with one medicine in every interesting state."""
    return FakeInventory(
        [
            medicine_factory(),
            medicine_factory(
                name="Amoxil 500",
                generic_name="Amoxicillin",
                category="Antibiotic",
                manufacturer="GSK",
                quantity=5,
                reorder_level=20,
                unit_price=6.5,
                expiry_days=20,
                batch_number="AM-7",
            ),
            medicine_factory(
                name="Crocin Advance",
                generic_name="Paracetamol",
                quantity=40,
                reorder_level=50,
                expiry_days=-3,
                manufacturer="GSK",
            ),
            medicine_factory(
                name="Glycomet 500",
                generic_name="Metformin",
                category="Antidiabetic",
                manufacturer="USV",
                quantity=600,
                reorder_level=100,
                unit_price=1.2,
                expiry_days=60,
            ),
        ]
    )


@pytest.fixture
def vocabulary() -> Vocabulary:
    return Vocabulary.from_settings(settings)


# ---------------------------------------------------------------------------
# Fake Redis
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Provide a fresh fakeredis instance per test."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


def make_token(
    sub: str = TEST_USER_ID,
    expires_in: timedelta = timedelta(hours=1),
    secret: str | None = None,
) -> str:
    """Sign a dashboard JWT the way the auth service would."""
    payload = {"sub": sub, "role": "pharmacist", "exp": datetime.now(UTC) + expires_in}
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


# ---------------------------------------------------------------------------
# API clients
# ---------------------------------------------------------------------------


@pytest.fixture
def chat_service(
    sample_inventory: FakeInventory,
    clock: Callable[[], datetime],
    vocabulary: Vocabulary,
) -> ChatService:
    """Chat service over the sample inventory with the remote path disabled."""
    return ChatService(
        data_source=sample_inventory,
        session_store=InMemorySessionStore(),
        vocabulary=vocabulary,
        clock=clock,
    )


@pytest.fixture
def mock_db() -> MagicMock:
    """AsyncSession stand-in whose execute() succeeds."""
    session = MagicMock(spec=AsyncSession)
    session.execute = AsyncMock(return_value=MagicMock())
    return session


@pytest_asyncio.fixture
async def client(
    chat_service: ChatService,
    mock_db: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with the chat service and database overridden."""

    async def _override_db() -> AsyncGenerator[MagicMock, None]:
        yield mock_db

    async def _override_chat_service() -> ChatService:
        return chat_service

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_chat_service] = _override_chat_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def plain_client() -> AsyncGenerator[AsyncClient, None]:
    """Minimal async test client with NO dependency overrides."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# LLM mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_chat_openai() -> Generator[MagicMock, None, None]:
    """Patch ChatOpenAI in the completion client.

    Configure ``mock_chat_openai.return_value.ainvoke`` per test.
    """
    with patch("pharmaventory.services.chatbot.completion_client.ChatOpenAI") as mock_class:
        mock_class.return_value.ainvoke = AsyncMock()
        yield mock_class
