"""Tests for the rule-based reply handlers."""

from collections.abc import Callable
from datetime import datetime

import pytest

from pharmaventory.services.chatbot.handlers import (
    HandlerResult,
    RuleBasedResponder,
    estimated_reorder_cost,
    suggested_reorder_quantity,
    urgency_label,
)
from pharmaventory.services.chatbot.intents import Intent, IntentType
from pharmaventory.services.chatbot.prompts import (
    APOLOGIES,
    CONVERSATIONAL_ABOUT_REPLY,
    CONVERSATIONAL_STATUS_REPLY,
    GENERAL_EMPTY_INVENTORY_REPLY,
    GENERAL_REPLY,
    GREETINGS,
    HELP_REPLY,
)
from pharmaventory.services.inventory_repository import SEARCHABLE_FIELDS, MedicineRecord
from tests.conftest import FakeInventory


def _intent(intent_type: IntentType, medicine: str | None = None) -> Intent:
    return Intent(intent_type, 0.9, medicine=medicine)


@pytest.fixture
def responder(
    sample_inventory: FakeInventory, clock: Callable[[], datetime]
) -> RuleBasedResponder:
    return RuleBasedResponder(sample_inventory, clock=clock)


class TestReorderPolicy:
    """Tests for the reorder quantity, urgency and cost rules."""

    def test_suggested_quantity_floor(self) -> None:
        """Reorder level 10 suggests max(30, 100) = 100 units."""
        assert suggested_reorder_quantity(10) == 100

    def test_suggested_quantity_multiplier(self) -> None:
        assert suggested_reorder_quantity(50) == 150

    @pytest.mark.parametrize(
        ("quantity", "reorder_level", "expected"),
        [(5, 20, "critical"), (10, 20, "high"), (15, 20, "high"), (16, 20, "medium"), (0, 0, "critical")],
    )
    def test_urgency(self, quantity: int, reorder_level: int, expected: str) -> None:
        """Ratio < 0.5 is critical, < 0.8 high, otherwise medium."""
        assert urgency_label(quantity, reorder_level) == expected

    def test_estimated_cost(self, medicine_factory: Callable[..., MedicineRecord]) -> None:
        """Reorder level 10 at 2.50 contributes 100 x 2.5 = 250.0."""
        med = medicine_factory(quantity=4, reorder_level=10, unit_price=2.5)
        assert estimated_reorder_cost([med]) == 250.0

    def test_estimated_cost_top_ten_only(
        self, medicine_factory: Callable[..., MedicineRecord]
    ) -> None:
        """Only the ten most urgent items are costed."""
        meds = [
            medicine_factory(name=f"M{i}", quantity=i, reorder_level=20, unit_price=1.0)
            for i in range(12)
        ]
        assert estimated_reorder_cost(meds) == 10 * 100.0


class TestHandlerResult:
    """Tests for HandlerResult rendering."""

    def test_ok_renders_reply(self) -> None:
        result = HandlerResult(IntentType.HELP, reply="text")
        assert result.ok
        assert result.render() == "text"

    def test_fault_renders_apology(self) -> None:
        """A fault keeps the exception and renders the apology."""
        error = RuntimeError("boom")
        result = HandlerResult(IntentType.ANALYTICS, fault=error, apology="sorry")
        assert not result.ok
        assert result.fault is error
        assert result.render() == "sorry"


class TestStaticHandlers:
    """Handlers that need no inventory data."""

    @pytest.mark.asyncio
    async def test_greeting_rotates(self, responder: RuleBasedResponder) -> None:
        """Greetings are chosen from the session turn count."""
        first = await responder.respond(_intent(IntentType.GREETING), "hi", turn_count=1)
        second = await responder.respond(_intent(IntentType.GREETING), "hi", turn_count=3)
        assert first.render() == GREETINGS[0]
        assert second.render() == GREETINGS[1]

    @pytest.mark.asyncio
    async def test_help(self, responder: RuleBasedResponder) -> None:
        result = await responder.respond(_intent(IntentType.HELP), "help")
        assert result.render() == HELP_REPLY

    @pytest.mark.asyncio
    async def test_conversational_variants(self, responder: RuleBasedResponder) -> None:
        """Status and about questions get their own replies."""
        status = await responder.respond(_intent(IntentType.CONVERSATIONAL), "how are you")
        about = await responder.respond(_intent(IntentType.CONVERSATIONAL), "tell me about you")
        assert status.render() == CONVERSATIONAL_STATUS_REPLY
        assert about.render() == CONVERSATIONAL_ABOUT_REPLY

    @pytest.mark.asyncio
    async def test_static_handlers_survive_data_faults(
        self, responder: RuleBasedResponder, sample_inventory: FakeInventory
    ) -> None:
        """Greeting and help never touch the inventory."""
        sample_inventory.error = RuntimeError("db down")
        result = await responder.respond(_intent(IntentType.HELP), "help")
        assert result.ok


class TestDataHandlers:
    """Handlers backed by inventory data."""

    @pytest.mark.asyncio
    async def test_low_stock_percentage(self, responder: RuleBasedResponder) -> None:
        """5 of 20 shows as 25%, most urgent first."""
        result = await responder.respond(_intent(IntentType.LOW_STOCK), "show low stock")
        reply = result.render()

        assert "2 medicine(s) need attention" in reply
        assert "1. **Amoxil 500** - 5 tablets (25% of reorder level)" in reply
        assert "2. **Crocin Advance** - 40 tablets (80% of reorder level)" in reply

    @pytest.mark.asyncio
    async def test_low_stock_all_clear(
        self, medicine_factory: Callable[..., MedicineRecord], clock: Callable[[], datetime]
    ) -> None:
        responder = RuleBasedResponder(FakeInventory([medicine_factory()]), clock=clock)
        result = await responder.respond(_intent(IntentType.LOW_STOCK), "low stock")
        assert "All your medicines are well-stocked" in result.render()

    @pytest.mark.asyncio
    async def test_reorder_critical_and_cost(
        self, medicine_factory: Callable[..., MedicineRecord], clock: Callable[[], datetime]
    ) -> None:
        """quantity 5 / level 20 is critical; 100 units at 2.50 cost 250.00."""
        med = medicine_factory(name="Amoxil 500", quantity=5, reorder_level=20, unit_price=2.5)
        responder = RuleBasedResponder(FakeInventory([med]), clock=clock)

        reply = (await responder.respond(_intent(IntentType.REORDER_SUGGESTION), "reorder")).render()

        assert "🚨 Critical **Amoxil 500**" in reply
        assert "Suggested Order: 100 tablets (₹250.00)" in reply
        assert "Total Estimated Cost:** ₹250.00" in reply

    @pytest.mark.asyncio
    async def test_stock_check_single_match_detail_card(
        self, responder: RuleBasedResponder, sample_inventory: FakeInventory
    ) -> None:
        """Exactly one match renders the detail card."""
        result = await responder.respond(
            _intent(IntentType.STOCK_CHECK, medicine="amoxicillin"), "amoxicillin left"
        )
        reply = result.render()

        assert "📦 **Amoxil 500** (Amoxicillin)" in reply
        assert "Status: ⚠️ Low Stock" in reply
        assert "Expires in 20 days" in reply
        assert "Recommendation" in reply
        assert sample_inventory.medicine_calls[-1]["limit"] == 10
        assert sample_inventory.medicine_calls[-1]["fields"] == ("name", "generic_name")

    @pytest.mark.asyncio
    async def test_stock_check_multiple_matches(self, responder: RuleBasedResponder) -> None:
        """Several matches are listed with status markers."""
        result = await responder.respond(
            _intent(IntentType.STOCK_CHECK, medicine="paracetamol"), "paracetamol left"
        )
        reply = result.render()

        assert 'I found 2 medicines matching "paracetamol"' in reply
        assert "⚠️ **Crocin Advance**" in reply
        assert "✅ **Dolo 650**" in reply
        assert "Which one would you like more details about?" in reply

    @pytest.mark.asyncio
    async def test_stock_check_not_found(self, responder: RuleBasedResponder) -> None:
        result = await responder.respond(
            _intent(IntentType.STOCK_CHECK, medicine="zincovit"), "zincovit stock"
        )
        assert 'I couldn\'t find "zincovit"' in result.render()

    @pytest.mark.asyncio
    async def test_search_uses_all_fields(
        self, responder: RuleBasedResponder, sample_inventory: FakeInventory
    ) -> None:
        """Search looks at name, generic name, category and manufacturer."""
        result = await responder.respond(_intent(IntentType.MEDICINE_SEARCH, medicine="gsk"), "find gsk")

        assert 'Found 2 result(s) for "gsk"' in result.render()
        assert sample_inventory.medicine_calls[-1]["fields"] == SEARCHABLE_FIELDS
        assert sample_inventory.medicine_calls[-1]["limit"] == 15

    @pytest.mark.asyncio
    async def test_category_overview(self, responder: RuleBasedResponder) -> None:
        """Categories are sorted by medicine count with totals and examples."""
        reply = (await responder.respond(_intent(IntentType.CATEGORY_QUERY), "categories")).render()

        assert reply.index("**Analgesic**") < reply.index("**Antibiotic**")
        assert "• Medicines: 2" in reply
        assert "• Total Stock: 240 units" in reply
        assert "• Examples: Crocin Advance, Dolo 650" in reply

    @pytest.mark.asyncio
    async def test_expiry_status(
        self, responder: RuleBasedResponder, sample_inventory: FakeInventory
    ) -> None:
        """Expired, next-30-days and 90-day buckets are reported."""
        reply = (await responder.respond(_intent(IntentType.EXPIRY_CHECK), "expiring")).render()

        assert "Expired (1)" in reply
        assert "Crocin Advance - Expired 3 days ago" in reply
        assert "Amoxil 500 - 20 days left" in reply
        assert "Expiring in 90 Days (1)" in reply
        assert sample_inventory.medicine_calls[-1]["order_by"] == "expiry_date"

    @pytest.mark.asyncio
    async def test_analytics(self, responder: RuleBasedResponder) -> None:
        """Analytics reports well-stocked share and top categories by value."""
        reply = (await responder.respond(_intent(IntentType.ANALYTICS), "analytics")).render()

        assert "Total Medicines: 4" in reply
        assert "Average Stock per Medicine: 211" in reply
        assert "Low Stock Items: 2 (50%)" in reply
        assert "Expiring Soon: 1" in reply
        assert "Well Stocked: 2 (50%)" in reply
        assert "1. Antidiabetic: ₹720.00" in reply
        assert "2. Analgesic: ₹480.00" in reply

    @pytest.mark.asyncio
    async def test_analytics_empty_inventory(self, clock: Callable[[], datetime]) -> None:
        """No medicines means no division by zero."""
        responder = RuleBasedResponder(FakeInventory(), clock=clock)
        result = await responder.respond(_intent(IntentType.ANALYTICS), "analytics")
        assert result.ok
        assert "no medicines" in result.render()

    @pytest.mark.asyncio
    async def test_inventory_overview(self, responder: RuleBasedResponder) -> None:
        reply = (await responder.respond(_intent(IntentType.INVENTORY_QUERY), "inventory")).render()

        assert "Total Medicines: **4**" in reply
        assert "Total Stock Units: **845**" in reply
        assert "2 medicine(s) are running low" in reply

    @pytest.mark.asyncio
    async def test_general_reply_depends_on_inventory(
        self, responder: RuleBasedResponder, clock: Callable[[], datetime]
    ) -> None:
        """General shows the capability list, or a short intro when empty."""
        stocked = await responder.respond(_intent(IntentType.GENERAL), "xyzzy")
        empty = await RuleBasedResponder(FakeInventory(), clock=clock).respond(
            _intent(IntentType.GENERAL), "xyzzy"
        )
        assert stocked.render() == GENERAL_REPLY
        assert empty.render() == GENERAL_EMPTY_INVENTORY_REPLY


class TestFaults:
    """Data faults become apologies instead of exceptions."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "intent_type",
        [
            IntentType.INVENTORY_QUERY,
            IntentType.LOW_STOCK,
            IntentType.CATEGORY_QUERY,
            IntentType.EXPIRY_CHECK,
            IntentType.REORDER_SUGGESTION,
            IntentType.ANALYTICS,
        ],
    )
    async def test_apology_on_fault(
        self,
        responder: RuleBasedResponder,
        sample_inventory: FakeInventory,
        intent_type: IntentType,
    ) -> None:
        """The handler's own apology is rendered and the fault kept."""
        error = ConnectionError("db down")
        sample_inventory.error = error

        result = await responder.respond(_intent(intent_type), "anything")

        assert not result.ok
        assert result.fault is error
        assert result.intent == intent_type
        assert result.render() == APOLOGIES[intent_type.value]

    @pytest.mark.asyncio
    async def test_general_fault(
        self, responder: RuleBasedResponder, sample_inventory: FakeInventory
    ) -> None:
        sample_inventory.error = ConnectionError("db down")
        result = await responder.respond(_intent(IntentType.GENERAL), "xyzzy")
        assert result.render() == APOLOGIES["general"]
