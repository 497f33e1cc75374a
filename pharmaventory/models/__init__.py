"""SQLAlchemy models."""

from pharmaventory.models.base import Base
from pharmaventory.models.medicine import Medicine
from pharmaventory.models.reorder_request import ReorderRequest, ReorderStatus

__all__ = [
    # Base
    "Base",
    # Inventory
    "Medicine",
    "ReorderRequest",
    "ReorderStatus",
]
