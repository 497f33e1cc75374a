"""Inventory retrieval for the remote completion path.

Builds a request-scoped ``InventorySnapshot``: one medicine fetch, optional
keyword narrowing, then every subset and statistic derived from that same list.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from pharmaventory.services.chatbot.vocabulary import Vocabulary
from pharmaventory.services.inventory_repository import (
    InventoryDataSource,
    MedicineRecord,
    ReorderRecord,
)

logger = logging.getLogger(__name__)

MAX_CONTEXT_MEDICINES = 100
MAX_PENDING_REORDERS = 10
EXPIRING_SOON_DAYS = 30
EXPIRING_LATER_DAYS = 90
MIN_KEYWORD_LENGTH = 4
REORDER_TRIGGERS = ("reorder", "order", "request")


@dataclass(frozen=True)
class ExpiryBuckets:
    """Medicines partitioned by expiry date relative to one instant."""

    expired: tuple[MedicineRecord, ...]
    expiring_soon: tuple[MedicineRecord, ...]
    expiring_later: tuple[MedicineRecord, ...]


@dataclass(frozen=True)
class SnapshotStatistics:
    total_medicines: int
    total_value: float
    total_quantity: int
    low_stock_count: int
    expired_count: int
    expiring_soon_count: int
    expiring_later_count: int


@dataclass(frozen=True)
class InventorySnapshot:
    """Point-in-time inventory bundle used to answer one query.

    Attributes:
        retrieved_at: The instant all date comparisons were made against
        medicines: Matching medicines, capped at MAX_CONTEXT_MEDICINES
        low_stock: Medicines at or below their reorder level
        expired / expiring_soon / expiring_later: Expiry buckets
        categories: Distinct categories in first-seen order
        statistics: Aggregates over the full (uncapped) matching list
        pending_reorders: Pending requests, or None when not asked about
    """

    retrieved_at: datetime
    medicines: tuple[MedicineRecord, ...]
    low_stock: tuple[MedicineRecord, ...]
    expired: tuple[MedicineRecord, ...]
    expiring_soon: tuple[MedicineRecord, ...]
    expiring_later: tuple[MedicineRecord, ...]
    categories: tuple[str, ...]
    statistics: SnapshotStatistics
    pending_reorders: tuple[ReorderRecord, ...] | None = None


def partition_by_expiry(medicines: Sequence[MedicineRecord], now: datetime) -> ExpiryBuckets:
    """Split medicines into expired, next-30-days and 31-to-90-days buckets."""
    soon_cutoff = now + timedelta(days=EXPIRING_SOON_DAYS)
    later_cutoff = now + timedelta(days=EXPIRING_LATER_DAYS)

    return ExpiryBuckets(
        expired=tuple(m for m in medicines if m.expiry_date < now),
        expiring_soon=tuple(m for m in medicines if now <= m.expiry_date <= soon_cutoff),
        expiring_later=tuple(
            m for m in medicines if soon_cutoff < m.expiry_date <= later_cutoff
        ),
    )


def low_stock(medicines: Sequence[MedicineRecord]) -> tuple[MedicineRecord, ...]:
    return tuple(m for m in medicines if m.needs_reorder)


def distinct_categories(medicines: Sequence[MedicineRecord]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(m.category for m in medicines))


def extract_keywords(query: str, vocabulary: Vocabulary) -> list[str]:
    """Known medicine names in the query plus any non-stop-word longer than 3 chars."""
    lowered = query.lower()
    found = [name for name in vocabulary.retrieval_medicines if name in lowered]
    found.extend(
        word
        for word in lowered.split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in vocabulary.stop_words
    )
    return list(dict.fromkeys(found))


def _matches_any(medicine: MedicineRecord, keywords: Sequence[str]) -> bool:
    haystack = (
        medicine.name.lower(),
        medicine.generic_name.lower(),
        medicine.category.lower(),
        medicine.manufacturer.lower(),
    )
    return any(keyword in field for keyword in keywords for field in haystack)


class ContextRetriever:
    """Pulls a bounded, relevance-filtered inventory snapshot for a query."""

    def __init__(
        self,
        data_source: InventoryDataSource,
        vocabulary: Vocabulary | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.data_source = data_source
        self.vocabulary = vocabulary or Vocabulary.from_settings()
        self.clock = clock or (lambda: datetime.now(UTC))

    async def retrieve(self, query: str) -> InventorySnapshot:
        """Build the snapshot for ``query``.

        An empty inventory yields empty subsets and zeroed statistics. When the
        extracted keywords match nothing, the whole inventory is used instead.
        """
        now = self.clock()
        medicines = await self.data_source.list_medicines(order_by="name")

        keywords = extract_keywords(query, self.vocabulary)
        if keywords:
            narrowed = [m for m in medicines if _matches_any(m, keywords)]
            if narrowed:
                medicines = narrowed
            else:
                logger.debug("No medicines matched keywords %s, using full inventory", keywords)

        low = low_stock(medicines)
        buckets = partition_by_expiry(medicines, now)

        statistics = SnapshotStatistics(
            total_medicines=len(medicines),
            total_value=sum(m.stock_value for m in medicines),
            total_quantity=sum(m.quantity for m in medicines),
            low_stock_count=len(low),
            expired_count=len(buckets.expired),
            expiring_soon_count=len(buckets.expiring_soon),
            expiring_later_count=len(buckets.expiring_later),
        )

        pending_reorders = None
        lowered = query.lower()
        if any(trigger in lowered for trigger in REORDER_TRIGGERS):
            pending_reorders = tuple(
                await self.data_source.list_pending_reorders(limit=MAX_PENDING_REORDERS)
            )

        logger.info(
            "Retrieved inventory snapshot: medicines=%d, low_stock=%d, keywords=%s",
            statistics.total_medicines,
            statistics.low_stock_count,
            keywords,
        )

        return InventorySnapshot(
            retrieved_at=now,
            medicines=tuple(medicines[:MAX_CONTEXT_MEDICINES]),
            low_stock=low,
            expired=buckets.expired,
            expiring_soon=buckets.expiring_soon,
            expiring_later=buckets.expiring_later,
            categories=distinct_categories(medicines),
            statistics=statistics,
            pending_reorders=pending_reorders,
        )
