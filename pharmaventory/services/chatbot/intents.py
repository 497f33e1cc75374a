"""Rule-based intent classification for the fallback chat path."""

import enum
import re
from dataclasses import dataclass

from pharmaventory.services.chatbot.vocabulary import Vocabulary

GENERAL_CONFIDENCE = 0.5
MIN_EXTRACTED_NAME = 3
MAX_EXTRACTED_NAME = 49


class IntentType(str, enum.Enum):
    """Closed set of intents a chat reply can be tagged with."""

    GREETING = "greeting"
    INVENTORY_QUERY = "inventory_query"
    STOCK_CHECK = "stock_check"
    LOW_STOCK = "low_stock"
    MEDICINE_SEARCH = "medicine_search"
    CATEGORY_QUERY = "category_query"
    EXPIRY_CHECK = "expiry_check"
    REORDER_SUGGESTION = "reorder_suggestion"
    ANALYTICS = "analytics"
    HELP = "help"
    CONVERSATIONAL = "conversational"
    GENERAL = "general"
    ERROR = "error"


@dataclass(frozen=True)
class Intent:
    """A classified message.

    Attributes:
        type: The intent label
        confidence: Rule confidence in [0, 1]
        medicine: Candidate medicine name extracted from the message, if any
    """

    type: IntentType
    confidence: float
    medicine: str | None = None


@dataclass(frozen=True)
class IntentRule:
    """Matches when every pattern is found in the message."""

    intent: IntentType
    confidence: float
    patterns: tuple[re.Pattern[str], ...]
    needs_medicine: bool = False


def _p(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


GREETING_WORDS = _p(r"^(hi|hello|hey|greetings|good morning|good afternoon|good evening)\b")
INVENTORY_WORDS = _p(r"(how many|total|count|list|show|display|what medicines|inventory|stock)")
LOW_STOCK_WORDS = _p(r"(\blow|running out|need to order|reorder|out of stock)")
STOCK_WORDS = _p(r"(stock|quantity|available|how much|left|remaining)")
SEARCH_WORDS = _p(r"(find|search|look for|where is|locate|get me)")
CATEGORY_WORDS = _p(r"(category|categories|type|kind|class)")
EXPIRY_WORDS = _p(r"(expir|expiring|expired|expiry date|going bad|soon to expire)")
REORDER_WORDS = _p(r"(reorder|order more|need to buy|purchase|restock|should order)")
ANALYTICS_WORDS = _p(r"(analytics|statistics|stats|report|summary|overview|insights|trends)")
HELP_WORDS = _p(r"(help|what can you|what do you|how can you|assist|support)")
CONVERSATIONAL_WORDS = _p(r"(how are you|what's up|tell me|explain|describe)")

# Order matters: patterns overlap, the first matching rule wins.
DEFAULT_RULES: tuple[IntentRule, ...] = (
    IntentRule(IntentType.GREETING, 0.95, (GREETING_WORDS,)),
    IntentRule(IntentType.LOW_STOCK, 0.9, (INVENTORY_WORDS, LOW_STOCK_WORDS)),
    IntentRule(IntentType.INVENTORY_QUERY, 0.85, (INVENTORY_WORDS,)),
    IntentRule(IntentType.STOCK_CHECK, 0.9, (STOCK_WORDS,), needs_medicine=True),
    IntentRule(IntentType.MEDICINE_SEARCH, 0.9, (SEARCH_WORDS,), needs_medicine=True),
    IntentRule(IntentType.CATEGORY_QUERY, 0.85, (CATEGORY_WORDS,)),
    IntentRule(IntentType.EXPIRY_CHECK, 0.9, (EXPIRY_WORDS,)),
    IntentRule(IntentType.REORDER_SUGGESTION, 0.9, (REORDER_WORDS,)),
    IntentRule(IntentType.ANALYTICS, 0.85, (ANALYTICS_WORDS,)),
    IntentRule(IntentType.HELP, 0.9, (HELP_WORDS,)),
    IntentRule(IntentType.CONVERSATIONAL, 0.7, (CONVERSATIONAL_WORDS,)),
)

NAME_TEMPLATES = (
    _p(
        r"(?:stock|quantity|available|find|search|get|locate|where is)\s+(?:of\s+)?"
        r"([a-z\s]+?)(?:\s|$|,|\.|\?)"
    ),
    _p(r"([a-z\s]+?)\s+(?:stock|quantity|available|medicine|drug|pill|tablet)"),
)


def extract_medicine_name(message: str, vocabulary: Vocabulary) -> str | None:
    """Pull a candidate medicine name out of a lower-cased message."""
    for name in vocabulary.common_medicines:
        if name in message:
            return name

    for template in NAME_TEMPLATES:
        match = template.search(message)
        if match and match.group(1):
            candidate = match.group(1).strip()
            if MIN_EXTRACTED_NAME <= len(candidate) <= MAX_EXTRACTED_NAME:
                return candidate

    return None


class IntentClassifier:
    """Deterministic first-match-wins classifier over an ordered rule table."""

    def __init__(
        self,
        vocabulary: Vocabulary | None = None,
        rules: tuple[IntentRule, ...] = DEFAULT_RULES,
    ) -> None:
        self.vocabulary = vocabulary or Vocabulary.from_settings()
        self.rules = rules

    def classify(self, message: str) -> Intent:
        """Classify a normalized (trimmed, lower-cased) message."""
        for rule in self.rules:
            if not all(p.search(message) for p in rule.patterns):
                continue

            if not rule.needs_medicine:
                return Intent(rule.intent, rule.confidence)

            medicine = extract_medicine_name(message, self.vocabulary)
            if medicine:
                return Intent(rule.intent, rule.confidence, medicine=medicine)

        return Intent(IntentType.GENERAL, GENERAL_CONFIDENCE)
