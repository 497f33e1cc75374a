"""Reorder request model for supplier restocking."""

import enum
import uuid

from sqlalchemy import Enum, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from pharmaventory.models.base import Base


class ReorderStatus(str, enum.Enum):
    """Lifecycle of a reorder request."""

    PENDING = "pending"
    APPROVED = "approved"
    ORDERED = "ordered"
    RECEIVED = "received"


class ReorderRequest(Base):
    """A request to restock a medicine.

    ``medicine_name`` and ``current_quantity`` are snapshots taken when the
    request was raised.
    """

    __tablename__ = "reorder_requests"

    medicine_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("medicines.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    medicine_name: Mapped[str] = mapped_column(String(255), nullable=False)
    current_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    requested_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ReorderStatus] = mapped_column(
        Enum(ReorderStatus, name="reorder_status", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ReorderStatus.PENDING,
        index=True,
    )
    requested_by: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<ReorderRequest {self.medicine_name} x{self.requested_quantity} ({self.status.value})>"
