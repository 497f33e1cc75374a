"""Render an inventory snapshot into a bounded context block for the LLM."""

from pharmaventory.services.chatbot.context_retriever import InventorySnapshot
from pharmaventory.services.chatbot.formatting import (
    CURRENCY_SYMBOL,
    days_since,
    days_until,
    format_count,
    format_date,
    format_money,
    stock_percentage,
)
from pharmaventory.services.chatbot.prompts import RAG_SYSTEM_PROMPT

HEADER_CATEGORIES = 10
MAX_LOW_STOCK_LINES = 15
MAX_EXPIRING_LINES = 15
MAX_EXPIRED_LINES = 10
FULL_CATALOG_LIMIT = 50
CATALOG_SAMPLE_SIZE = 20
RELATIVE_EXPIRY_DAYS = 90


def _stock_marker(quantity: int, reorder_level: int) -> str:
    return "✅" if quantity > reorder_level else "⚠️"


def format_inventory_context(snapshot: InventorySnapshot) -> str:
    """Render the snapshot as plain text.

    Sections other than the statistics header are emitted only when they have
    entries. The full catalogue is included only for 50 medicines or fewer;
    larger inventories get a 20-entry sample.
    """
    now = snapshot.retrieved_at
    stats = snapshot.statistics
    categories = snapshot.categories
    more = "..." if len(categories) > HEADER_CATEGORIES else ""

    lines = [
        "=== PHARMACY INVENTORY DATABASE CONTEXT ===",
        "",
        "📊 INVENTORY STATISTICS:",
        f"- Total Medicines: {stats.total_medicines}",
        f"- Total Inventory Value: {format_money(stats.total_value)}",
        f"- Total Stock Units: {format_count(stats.total_quantity)}",
        f"- Low Stock Items: {stats.low_stock_count}",
        f"- Expired Items: {stats.expired_count}",
        f"- Expiring Soon (30 days): {stats.expiring_soon_count}",
        f"- Expiring in 31-90 days: {stats.expiring_later_count}",
        f"- Categories: {len(categories)} ({', '.join(categories[:HEADER_CATEGORIES])}{more})",
        "",
    ]

    if snapshot.low_stock:
        lines.append("⚠️ LOW STOCK ITEMS (Need Reordering):")
        for med in snapshot.low_stock[:MAX_LOW_STOCK_LINES]:
            pct = stock_percentage(med.quantity, med.reorder_level)
            lines.append(
                f"- {med.name} ({med.generic_name}): {med.quantity} {med.unit} "
                f"({pct}% of reorder level {med.reorder_level} {med.unit})"
            )
            lines.append(
                f"  Category: {med.category} | Location: {med.location} | "
                f"Price: {format_money(med.unit_price)}/{med.unit}"
            )
        lines.append("")

    if snapshot.expiring_soon:
        lines.append("📅 EXPIRING SOON (Next 30 Days):")
        for med in snapshot.expiring_soon[:MAX_EXPIRING_LINES]:
            lines.append(
                f"- {med.name}: Expires in {days_until(med.expiry_date, now)} days "
                f"({med.quantity} {med.unit} remaining)"
            )
            lines.append(f"  Location: {med.location} | Batch: {med.batch_number}")
        lines.append("")

    if snapshot.expired:
        lines.append("🚨 EXPIRED ITEMS (Remove from inventory):")
        for med in snapshot.expired[:MAX_EXPIRED_LINES]:
            lines.append(
                f"- {med.name}: Expired {days_since(med.expiry_date, now)} days ago "
                f"({med.quantity} {med.unit})"
            )
        lines.append("")

    medicines = snapshot.medicines
    if 0 < len(medicines) <= FULL_CATALOG_LIMIT:
        lines.append("📦 ALL MEDICINES IN INVENTORY:")
        for med in medicines:
            days_left = days_until(med.expiry_date, now)
            lines.append(
                f"{_stock_marker(med.quantity, med.reorder_level)} "
                f"{med.name} ({med.generic_name})"
            )
            lines.append(
                f"   Stock: {med.quantity} {med.unit} | "
                f"Reorder Level: {med.reorder_level} {med.unit}"
            )
            lines.append(f"   Category: {med.category} | Location: {med.location}")
            lines.append(
                f"   Manufacturer: {med.manufacturer} | "
                f"Price: {format_money(med.unit_price)}/{med.unit}"
            )
            if 0 < days_left < RELATIVE_EXPIRY_DAYS:
                lines.append(f"   Expiry: {days_left} days ({format_date(med.expiry_date)})")
            elif days_left > 0:
                lines.append(f"   Expiry: {format_date(med.expiry_date)}")
            lines.append("")
    elif len(medicines) > FULL_CATALOG_LIMIT:
        lines.append(f"📦 SAMPLE MEDICINES ({stats.total_medicines} total in inventory):")
        for med in medicines[:CATALOG_SAMPLE_SIZE]:
            lines.append(
                f"{_stock_marker(med.quantity, med.reorder_level)} "
                f"{med.name} ({med.generic_name}): {med.quantity} {med.unit} | "
                f"{med.category} | {med.location}"
            )
        lines.append("")
        lines.append(f"...and {stats.total_medicines - CATALOG_SAMPLE_SIZE} more medicines.")
        lines.append("")

    if snapshot.pending_reorders:
        lines.append("🛒 PENDING REORDER REQUESTS:")
        for req in snapshot.pending_reorders:
            lines.append(
                f"- {req.medicine_name}: Requested {req.requested_quantity} units "
                f"(Current: {req.current_quantity})"
            )
            lines.append(f"  Status: {req.status} | Requested by: {req.requested_by}")
        lines.append("")

    return "\n".join(lines)


def build_system_prompt(context: str) -> str:
    """Wrap a rendered context block in the assistant's instructions."""
    return RAG_SYSTEM_PROMPT.format(context=context, currency=CURRENCY_SYMBOL)
