"""Read-only access to medicine and reorder-request records."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pharmaventory.models.medicine import Medicine
from pharmaventory.models.reorder_request import ReorderRequest, ReorderStatus

SEARCHABLE_FIELDS = ("name", "generic_name", "category", "manufacturer")


@dataclass(frozen=True)
class MedicineRecord:
    """A medicine as seen by the chatbot."""

    name: str
    generic_name: str
    category: str
    manufacturer: str
    quantity: int
    unit: str
    reorder_level: int
    unit_price: float
    batch_number: str
    expiry_date: datetime
    location: str

    @property
    def needs_reorder(self) -> bool:
        return self.quantity <= self.reorder_level

    @property
    def stock_value(self) -> float:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class ReorderRecord:
    """A reorder request as seen by the chatbot."""

    medicine_id: UUID
    medicine_name: str
    current_quantity: int
    requested_quantity: int
    status: str
    requested_by: str
    created_at: datetime


class InventoryDataSource(Protocol):
    """Read interface the chatbot consumes; implementations may raise on failure."""

    async def list_medicines(
        self,
        search: str | None = None,
        fields: Sequence[str] = ("name", "generic_name"),
        limit: int | None = None,
        order_by: str = "name",
    ) -> list[MedicineRecord]: ...

    async def list_pending_reorders(self, limit: int = 10) -> list[ReorderRecord]: ...


def _escape_like(term: str) -> str:
    """Escape LIKE special characters to prevent wildcard injection."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _to_record(medicine: Medicine) -> MedicineRecord:
    return MedicineRecord(
        name=medicine.name,
        generic_name=medicine.generic_name,
        category=medicine.category,
        manufacturer=medicine.manufacturer,
        quantity=medicine.quantity,
        unit=medicine.unit,
        reorder_level=medicine.reorder_level,
        unit_price=float(medicine.unit_price),
        batch_number=medicine.batch_number,
        expiry_date=_as_utc(medicine.expiry_date),
        location=medicine.location,
    )


class InventoryRepository:
    """SQLAlchemy-backed implementation of InventoryDataSource."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_medicines(
        self,
        search: str | None = None,
        fields: Sequence[str] = ("name", "generic_name"),
        limit: int | None = None,
        order_by: str = "name",
    ) -> list[MedicineRecord]:
        """List medicines, optionally narrowed by a case-insensitive search.

        Args:
            search: Substring matched against any of ``fields``
            fields: Columns searched (subset of SEARCHABLE_FIELDS)
            limit: Maximum number of rows
            order_by: Sort column, ``name`` or ``expiry_date``

        Returns:
            Matching medicines as plain records
        """
        stmt = select(Medicine)

        if search:
            pattern = f"%{_escape_like(search)}%"
            columns = [getattr(Medicine, f) for f in fields if f in SEARCHABLE_FIELDS]
            stmt = stmt.where(or_(*(column.ilike(pattern) for column in columns)))

        sort_column = Medicine.expiry_date if order_by == "expiry_date" else Medicine.name
        stmt = stmt.order_by(sort_column)

        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return [_to_record(m) for m in result.scalars().all()]

    async def list_pending_reorders(self, limit: int = 10) -> list[ReorderRecord]:
        """List the most recent pending reorder requests."""
        stmt = (
            select(ReorderRequest)
            .where(ReorderRequest.status == ReorderStatus.PENDING)
            .order_by(ReorderRequest.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)

        return [
            ReorderRecord(
                medicine_id=r.medicine_id,
                medicine_name=r.medicine_name,
                current_quantity=r.current_quantity,
                requested_quantity=r.requested_quantity,
                status=r.status.value,
                requested_by=r.requested_by,
                created_at=r.created_at,
            )
            for r in result.scalars().all()
        ]
