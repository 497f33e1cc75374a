"""Seed script for a demo pharmacy inventory.

Creates the tables (if missing) and a small inventory that exercises every
assistant answer:
- well-stocked, low-stock and critical medicines
- expired, expiring-soon and expiring-within-90-days batches
- pending reorder requests

Usage:
    uv run python -m scripts.seed_inventory
"""

import asyncio
import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from pharmaventory.core.database import async_session_maker, engine
from pharmaventory.models import Base, Medicine, ReorderRequest, ReorderStatus

PARACETAMOL_ID = uuid.UUID("aaaaaaaa-0000-0000-0000-000000000001")
AMOXICILLIN_ID = uuid.UUID("aaaaaaaa-0000-0000-0000-000000000002")
INSULIN_ID = uuid.UUID("aaaaaaaa-0000-0000-0000-000000000003")

# (id, name, generic, category, manufacturer, qty, unit, reorder, price, batch, days to expiry, location)
MEDICINES = [
    (PARACETAMOL_ID, "Dolo 650", "Paracetamol", "Analgesic", "Micro Labs",
     420, "tablets", 100, "2.10", "DL-2401", 400, "Rack A1"),
    (AMOXICILLIN_ID, "Amoxil 500", "Amoxicillin", "Antibiotic", "GSK",
     18, "capsules", 60, "6.50", "AM-2311", 25, "Rack B2"),
    (INSULIN_ID, "Huminsulin R", "Insulin", "Antidiabetic", "Lilly",
     4, "vials", 20, "145.00", "HI-2402", 70, "Fridge 1"),
    (uuid.UUID("aaaaaaaa-0000-0000-0000-000000000004"), "Crocin Advance", "Paracetamol",
     "Analgesic", "GSK", 75, "tablets", 80, "1.80", "CR-2310", -12, "Rack A2"),
    (uuid.UUID("aaaaaaaa-0000-0000-0000-000000000005"), "Glycomet 500", "Metformin",
     "Antidiabetic", "USV", 640, "tablets", 150, "1.20", "GM-2405", 540, "Rack C1"),
    (uuid.UUID("aaaaaaaa-0000-0000-0000-000000000006"), "Combiflam", "Ibuprofen",
     "Analgesic", "Sanofi", 210, "tablets", 100, "3.40", "CF-2403", 10, "Rack A3"),
    (uuid.UUID("aaaaaaaa-0000-0000-0000-000000000007"), "Azithral 500", "Azithromycin",
     "Antibiotic", "Alembic", 95, "tablets", 40, "21.00", "AZ-2404", 300, "Rack B1"),
    (uuid.UUID("aaaaaaaa-0000-0000-0000-000000000008"), "Telma 40", "Telmisartan",
     "Antihypertensive", "Glenmark", 35, "tablets", 50, "8.75", "TM-2402", 180, "Rack D1"),
    (uuid.UUID("aaaaaaaa-0000-0000-0000-000000000009"), "Cetzine", "Cetirizine",
     "Antihistamine", "Alkem", 300, "tablets", 60, "1.50", "CZ-2406", 800, "Rack E2"),
    (uuid.UUID("aaaaaaaa-0000-0000-0000-000000000010"), "Pan 40", "Pantoprazole",
     "Antacid", "Alkem", 12, "tablets", 80, "5.20", "PN-2312", 45, "Rack E1"),
]


async def seed(session: AsyncSession) -> None:
    """Replace the demo rows with a fresh inventory."""
    now = datetime.now(UTC)

    await session.execute(delete(ReorderRequest))
    await session.execute(
        delete(Medicine).where(Medicine.id.in_([row[0] for row in MEDICINES]))
    )

    for (
        med_id, name, generic, category, manufacturer, qty, unit,
        reorder, price, batch, expiry_days, location,
    ) in MEDICINES:
        session.add(
            Medicine(
                id=med_id,
                name=name,
                generic_name=generic,
                category=category,
                manufacturer=manufacturer,
                quantity=qty,
                unit=unit,
                reorder_level=reorder,
                unit_price=Decimal(price),
                batch_number=batch,
                expiry_date=now + timedelta(days=expiry_days),
                location=location,
            )
        )
    await session.flush()

    session.add_all(
        [
            ReorderRequest(
                medicine_id=AMOXICILLIN_ID,
                medicine_name="Amoxil 500",
                current_quantity=18,
                requested_quantity=180,
                status=ReorderStatus.PENDING,
                requested_by="pharmacist@pharmaventory.test",
            ),
            ReorderRequest(
                medicine_id=INSULIN_ID,
                medicine_name="Huminsulin R",
                current_quantity=4,
                requested_quantity=100,
                status=ReorderStatus.PENDING,
                requested_by="pharmacist@pharmaventory.test",
            ),
        ]
    )

    await session.commit()


async def main() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        await seed(session)

    await engine.dispose()

    print("=" * 60)
    print("  Inventory seed data created successfully!")
    print("=" * 60)
    print(f"  Medicines:          {len(MEDICINES)}")
    print("  Pending reorders:   2")
    print()
    print('  Try: "show low stock", "what is expiring?", "reorder suggestions"')
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
