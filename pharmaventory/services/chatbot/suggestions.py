"""Follow-up suggestion phrases per intent."""

from pharmaventory.services.chatbot.intents import IntentType

MAX_SUGGESTIONS = 3

REMOTE_SUGGESTIONS = ["Show more details", "Check another medicine", "Analytics"]

SUGGESTIONS: dict[IntentType, list[str]] = {
    IntentType.GREETING: ["Show inventory", "Check low stock", "Medicine search"],
    IntentType.INVENTORY_QUERY: ["Low stock items", "Expiring soon", "Analytics"],
    IntentType.STOCK_CHECK: ["Search another medicine", "Show all medicines", "Low stock alert"],
    IntentType.LOW_STOCK: ["Reorder suggestions", "Inventory analytics", "Category overview"],
    IntentType.MEDICINE_SEARCH: ["Stock check", "Category search", "Low stock items"],
    IntentType.CATEGORY_QUERY: ["Medicine search", "Inventory overview", "Analytics"],
    IntentType.EXPIRY_CHECK: ["Reorder suggestions", "Low stock items", "Analytics"],
    IntentType.REORDER_SUGGESTION: ["Low stock items", "Inventory overview", "Analytics"],
    IntentType.ANALYTICS: ["Low stock items", "Expiry check", "Reorder suggestions"],
    IntentType.HELP: ["Show inventory", "Check stock", "Low stock alert"],
    IntentType.GENERAL: ["Show inventory", "Low stock items", "Help"],
}


def suggestions_for(intent: IntentType | None, remote: bool = False) -> list[str]:
    """Return up to three follow-up phrases for the intent that produced the reply."""
    if remote:
        phrases = REMOTE_SUGGESTIONS
    else:
        phrases = SUGGESTIONS.get(intent) or SUGGESTIONS[IntentType.GENERAL]
    return list(phrases[:MAX_SUGGESTIONS])
