"""Medicine model for pharmacy inventory stock."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pharmaventory.models.base import Base


class Medicine(Base):
    """A stocked medicine batch.

    A medicine needs reordering once ``quantity`` falls to or below
    ``reorder_level``.
    """

    __tablename__ = "medicines"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    generic_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    manufacturer: Mapped[str] = mapped_column(String(255), nullable=False)

    # Stock
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unit: Mapped[str] = mapped_column(String(50), nullable=False)
    reorder_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Batch tracking
    batch_number: Mapped[str] = mapped_column(String(100), nullable=False)
    expiry_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    location: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        CheckConstraint("reorder_level >= 0", name="reorder_level_non_negative"),
        CheckConstraint("unit_price >= 0", name="unit_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Medicine {self.name} ({self.batch_number})>"
