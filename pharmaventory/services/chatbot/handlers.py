"""Rule-based reply handlers, one per intent."""

import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from pharmaventory.services.chatbot.context_retriever import (
    distinct_categories,
    low_stock,
    partition_by_expiry,
)
from pharmaventory.services.chatbot.formatting import (
    days_since,
    days_until,
    format_count,
    format_date,
    format_money,
    round_half_up,
    stock_percentage,
    stock_ratio,
)
from pharmaventory.services.chatbot.intents import Intent, IntentType
from pharmaventory.services.chatbot.prompts import (
    APOLOGIES,
    CONVERSATIONAL_ABOUT_REPLY,
    CONVERSATIONAL_DEFAULT_REPLY,
    CONVERSATIONAL_STATUS_REPLY,
    GENERAL_EMPTY_INVENTORY_REPLY,
    GENERAL_REPLY,
    GREETINGS,
    HELP_REPLY,
)
from pharmaventory.services.inventory_repository import (
    SEARCHABLE_FIELDS,
    InventoryDataSource,
    MedicineRecord,
)

logger = logging.getLogger(__name__)

MAX_ALERT_ITEMS = 10
STOCK_CHECK_LIMIT = 10
SEARCH_LIMIT = 15
REORDER_MULTIPLIER = 3
MIN_REORDER_QUANTITY = 100
CRITICAL_RATIO = 0.5
HIGH_RATIO = 0.8
TOP_CATEGORIES = 5
DETAIL_EXPIRY_WARNING_DAYS = 90

_STATUS_PATTERN = re.compile(r"(how are you|what's up)")
_ABOUT_PATTERN = re.compile(r"(tell me about|explain|describe)")


@dataclass(frozen=True)
class HandlerResult:
    """Outcome of one handler: either a reply or a data fault.

    The fault is kept so callers and tests can inspect it; ``render`` turns it
    into the handler's fixed apology.
    """

    intent: IntentType
    reply: str | None = None
    fault: Exception | None = None
    apology: str | None = None

    @property
    def ok(self) -> bool:
        return self.fault is None

    def render(self) -> str:
        if self.ok:
            return self.reply or ""
        return self.apology or APOLOGIES["general"]


def suggested_reorder_quantity(reorder_level: int) -> int:
    return max(reorder_level * REORDER_MULTIPLIER, MIN_REORDER_QUANTITY)


def urgency_label(quantity: int, reorder_level: int) -> str:
    ratio = stock_ratio(quantity, reorder_level)
    if ratio < CRITICAL_RATIO:
        return "critical"
    if ratio < HIGH_RATIO:
        return "high"
    return "medium"


_URGENCY_BADGES = {"critical": "🚨 Critical", "high": "⚠️ High", "medium": "📋 Medium"}


def by_urgency(medicines: Sequence[MedicineRecord]) -> list[MedicineRecord]:
    return sorted(medicines, key=lambda m: stock_ratio(m.quantity, m.reorder_level))


def estimated_reorder_cost(medicines: Sequence[MedicineRecord]) -> float:
    """Cost of the suggested order for the 10 most urgent low-stock medicines."""
    urgent = by_urgency(low_stock(medicines))[:MAX_ALERT_ITEMS]
    return sum(suggested_reorder_quantity(m.reorder_level) * m.unit_price for m in urgent)


def _status_marker(med: MedicineRecord) -> str:
    return "⚠️" if med.needs_reorder else "✅"


def render_detail_card(med: MedicineRecord, now: datetime) -> str:
    status = "⚠️ Low Stock" if med.needs_reorder else "✅ Well Stocked"
    lines = [
        f"📦 **{med.name}** ({med.generic_name})",
        "",
        f"• Current Stock: **{med.quantity} {med.unit}**",
        f"• Status: {status}",
        f"• Reorder Level: {med.reorder_level} {med.unit}",
        f"• Location: {med.location}",
        f"• Category: {med.category}",
        f"• Manufacturer: {med.manufacturer}",
        f"• Unit Price: {format_money(med.unit_price)}",
    ]

    days_left = days_until(med.expiry_date, now)
    if 0 < days_left < DETAIL_EXPIRY_WARNING_DAYS:
        lines.append(f"\n⚠️ Expires in {days_left} days!")
    elif days_left > 0:
        lines.append(f"\n📅 Expires: {format_date(med.expiry_date)}")
    else:
        lines.append(f"\n🚨 Expired {days_since(med.expiry_date, now)} days ago!")

    if med.needs_reorder:
        lines.append("\n💡 **Recommendation:** Consider reordering soon to avoid stockout!")

    return "\n".join(lines)


class RuleBasedResponder:
    """Answers a classified intent from live inventory data using fixed templates."""

    def __init__(
        self,
        data_source: InventoryDataSource,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.data_source = data_source
        self.clock = clock or (lambda: datetime.now(UTC))
        self._handlers: dict[IntentType, Callable[[Intent], Awaitable[str]]] = {
            IntentType.INVENTORY_QUERY: self.inventory_overview,
            IntentType.STOCK_CHECK: self.stock_check,
            IntentType.LOW_STOCK: self.low_stock_alert,
            IntentType.MEDICINE_SEARCH: self.medicine_search,
            IntentType.CATEGORY_QUERY: self.category_overview,
            IntentType.EXPIRY_CHECK: self.expiry_status,
            IntentType.REORDER_SUGGESTION: self.reorder_suggestions,
            IntentType.ANALYTICS: self.analytics,
        }

    async def respond(self, intent: Intent, message: str, turn_count: int = 0) -> HandlerResult:
        """Run the handler for ``intent``.

        Args:
            intent: Classified intent (with extracted medicine, if any)
            message: The normalized user message
            turn_count: Turns already in the session, used to vary greetings

        Returns:
            HandlerResult carrying the reply, or the fault and apology
        """
        if intent.type == IntentType.GREETING:
            return HandlerResult(intent.type, reply=GREETINGS[(turn_count // 2) % len(GREETINGS)])
        if intent.type == IntentType.HELP:
            return HandlerResult(intent.type, reply=HELP_REPLY)
        if intent.type == IntentType.CONVERSATIONAL:
            return HandlerResult(intent.type, reply=self.conversational(message))

        handler = self._handlers.get(intent.type)
        apology_key = intent.type.value if handler else IntentType.GENERAL.value
        try:
            if handler is None:
                return HandlerResult(IntentType.GENERAL, reply=await self.general())
            return HandlerResult(intent.type, reply=await handler(intent))
        except Exception as e:
            logger.exception("Handler %s failed reading inventory", intent.type.value)
            return HandlerResult(
                intent.type if handler else IntentType.GENERAL,
                fault=e,
                apology=APOLOGIES[apology_key],
            )

    # === Data-backed handlers ===

    async def inventory_overview(self, intent: Intent) -> str:
        medicines = await self.data_source.list_medicines(order_by="name")
        categories = distinct_categories(medicines)
        low = low_stock(medicines)
        more = "..." if len(categories) > 5 else ""

        lines = [
            "📊 **Inventory Overview:**",
            "",
            f"• Total Medicines: **{len(medicines)}**",
            f"• Total Stock Units: **{format_count(sum(m.quantity for m in medicines))}**",
            f"• Categories: **{len(categories)}** ({', '.join(categories[:5])}{more})",
        ]
        if low:
            lines.append(
                f"\n⚠️ **Alert:** {len(low)} medicine(s) are running low and need reordering!"
            )
            lines.append(f"Top priorities: {', '.join(m.name for m in low[:3])}")
        else:
            lines.append("\n✅ All medicines are well-stocked!")
        return "\n".join(lines)

    async def stock_check(self, intent: Intent) -> str:
        term = intent.medicine or ""
        medicines = await self.data_source.list_medicines(
            search=term, fields=("name", "generic_name"), limit=STOCK_CHECK_LIMIT
        )

        if not medicines:
            return (
                f'I couldn\'t find "{term}" in your inventory. '
                "Would you like me to search for similar medicines?"
            )
        if len(medicines) == 1:
            return render_detail_card(medicines[0], self.clock())

        lines = [f'I found {len(medicines)} medicines matching "{term}":', ""]
        for idx, med in enumerate(medicines, 1):
            lines.append(
                f"{idx}. {_status_marker(med)} **{med.name}** - "
                f"{med.quantity} {med.unit} ({med.category})"
            )
        lines.append("\nWhich one would you like more details about?")
        return "\n".join(lines)

    async def low_stock_alert(self, intent: Intent) -> str:
        medicines = await self.data_source.list_medicines()
        low = by_urgency(low_stock(medicines))

        if not low:
            return (
                "✅ Great news! All your medicines are well-stocked. "
                "No immediate reordering needed."
            )

        lines = [f"⚠️ **Low Stock Alert:** {len(low)} medicine(s) need attention!", ""]
        for idx, med in enumerate(low[:MAX_ALERT_ITEMS], 1):
            pct = stock_percentage(med.quantity, med.reorder_level)
            lines.append(
                f"{idx}. **{med.name}** - {med.quantity} {med.unit} ({pct}% of reorder level)"
            )
            lines.append(f"   Category: {med.category} | Location: {med.location}\n")
        if len(low) > MAX_ALERT_ITEMS:
            lines.append(f"...and {len(low) - MAX_ALERT_ITEMS} more.\n")
        lines.append("💡 **Action Required:** Consider placing reorder requests for these items.")
        return "\n".join(lines)

    async def medicine_search(self, intent: Intent) -> str:
        term = intent.medicine or ""
        medicines = await self.data_source.list_medicines(
            search=term, fields=SEARCHABLE_FIELDS, limit=SEARCH_LIMIT
        )

        if not medicines:
            return (
                f'I couldn\'t find any medicines matching "{term}". '
                "Try searching by name, generic name, category, or manufacturer."
            )
        if len(medicines) == 1:
            return render_detail_card(medicines[0], self.clock())

        lines = [f'🔍 Found {len(medicines)} result(s) for "{term}":', ""]
        for idx, med in enumerate(medicines, 1):
            lines.append(f"{idx}. {_status_marker(med)} **{med.name}**")
            lines.append(
                f"   Generic: {med.generic_name} | Stock: {med.quantity} {med.unit}"
            )
            lines.append(f"   Category: {med.category} | Location: {med.location}\n")
        return "\n".join(lines)

    async def category_overview(self, intent: Intent) -> str:
        medicines = await self.data_source.list_medicines()
        groups: dict[str, list[MedicineRecord]] = {}
        for med in medicines:
            groups.setdefault(med.category, []).append(med)

        if not groups:
            return "📂 No medicine categories yet. Add medicines to the inventory to see them here."

        lines = ["📂 **Medicine Categories:**", ""]
        for category, members in sorted(groups.items(), key=lambda kv: len(kv[1]), reverse=True):
            examples = ", ".join(m.name for m in members[:3])
            more = "..." if len(members) > 3 else ""
            lines.append(f"**{category}**")
            lines.append(f"• Medicines: {len(members)}")
            lines.append(f"• Total Stock: {format_count(sum(m.quantity for m in members))} units")
            lines.append(f"• Examples: {examples}{more}\n")
        return "\n".join(lines)

    async def expiry_status(self, intent: Intent) -> str:
        medicines = await self.data_source.list_medicines(order_by="expiry_date")
        now = self.clock()
        buckets = partition_by_expiry(medicines, now)

        lines = ["📅 **Expiry Status:**", ""]
        if buckets.expired:
            lines.append(f"🚨 **Expired ({len(buckets.expired)}):**")
            for med in buckets.expired[:5]:
                lines.append(
                    f"• {med.name} - Expired {days_since(med.expiry_date, now)} days ago "
                    f"({med.quantity} {med.unit})"
                )
            lines.append("")
        if buckets.expiring_soon:
            lines.append(f"⚠️ **Expiring Soon - Next 30 Days ({len(buckets.expiring_soon)}):**")
            for med in buckets.expiring_soon[:10]:
                lines.append(
                    f"• {med.name} - {days_until(med.expiry_date, now)} days left "
                    f"({med.quantity} {med.unit})"
                )
            lines.append("")
        if buckets.expiring_later:
            lines.append(f"📋 **Expiring in 90 Days ({len(buckets.expiring_later)}):**")
            lines.append("Consider prioritizing these for sale.\n")
        if not buckets.expired and not buckets.expiring_soon:
            lines.append("✅ Great! No medicines are expiring in the next 30 days.")
        return "\n".join(lines)

    async def reorder_suggestions(self, intent: Intent) -> str:
        medicines = await self.data_source.list_medicines()
        needs_reorder = by_urgency(low_stock(medicines))

        if not needs_reorder:
            return "✅ All medicines are well-stocked! No reordering needed at this time."

        lines = [
            "🛒 **Reorder Recommendations:**",
            "",
            f"I've identified {len(needs_reorder)} medicine(s) that need reordering:",
            "",
        ]
        for idx, med in enumerate(needs_reorder[:MAX_ALERT_ITEMS], 1):
            qty = suggested_reorder_quantity(med.reorder_level)
            badge = _URGENCY_BADGES[urgency_label(med.quantity, med.reorder_level)]
            lines.append(f"{idx}. {badge} **{med.name}**")
            lines.append(
                f"   Current: {med.quantity} {med.unit} | "
                f"Reorder Level: {med.reorder_level} {med.unit}"
            )
            lines.append(
                f"   💡 Suggested Order: {qty} {med.unit} ({format_money(qty * med.unit_price)})\n"
            )
        lines.append(
            f"💼 **Total Estimated Cost:** {format_money(estimated_reorder_cost(medicines))}\n"
        )
        lines.append("Would you like me to help you create reorder requests for these?")
        return "\n".join(lines)

    async def analytics(self, intent: Intent) -> str:
        medicines = await self.data_source.list_medicines()
        total = len(medicines)
        if total == 0:
            return "📊 There are no medicines in the inventory yet, so there is nothing to analyse."

        now = self.clock()
        low = low_stock(medicines)
        expiring_soon = [m for m in medicines if 0 < days_until(m.expiry_date, now) <= 30]
        total_value = sum(m.stock_value for m in medicines)
        average_stock = round_half_up(sum(m.quantity for m in medicines) / total)

        category_value: dict[str, float] = {}
        for med in medicines:
            category_value[med.category] = category_value.get(med.category, 0.0) + med.stock_value
        top_categories = sorted(category_value.items(), key=lambda kv: kv[1], reverse=True)

        lines = [
            "📊 **Inventory Analytics:**",
            "",
            "**Overview:**",
            f"• Total Medicines: {total}",
            f"• Total Inventory Value: {format_money(total_value)}",
            f"• Categories: {len(category_value)}",
            f"• Average Stock per Medicine: {average_stock}",
            "",
            "**Health Metrics:**",
            f"• Low Stock Items: {len(low)} ({round_half_up(len(low) / total * 100)}%)",
            f"• Expiring Soon: {len(expiring_soon)}",
            f"• Well Stocked: {total - len(low)} "
            f"({round_half_up((total - len(low)) / total * 100)}%)",
            "",
            "**Top Categories by Value:**",
        ]
        for idx, (category, value) in enumerate(top_categories[:TOP_CATEGORIES], 1):
            lines.append(f"{idx}. {category}: {format_money(value)}")
        return "\n".join(lines)

    async def general(self) -> str:
        medicines = await self.data_source.list_medicines(limit=5)
        return GENERAL_REPLY if medicines else GENERAL_EMPTY_INVENTORY_REPLY

    # === Static handlers ===

    @staticmethod
    def conversational(message: str) -> str:
        if _STATUS_PATTERN.search(message):
            return CONVERSATIONAL_STATUS_REPLY
        if _ABOUT_PATTERN.search(message):
            return CONVERSATIONAL_ABOUT_REPLY
        return CONVERSATIONAL_DEFAULT_REPLY
