"""Tests for the rule-based intent classifier."""

import pytest

from pharmaventory.services.chatbot.intents import (
    DEFAULT_RULES,
    GENERAL_CONFIDENCE,
    IntentClassifier,
    IntentType,
    extract_medicine_name,
)
from pharmaventory.services.chatbot.vocabulary import Vocabulary


@pytest.fixture
def classifier(vocabulary: Vocabulary) -> IntentClassifier:
    return IntentClassifier(vocabulary=vocabulary)


class TestRuleOrder:
    """Overlapping patterns are resolved by rule order."""

    def test_low_stock_beats_inventory_query(self, classifier: IntentClassifier) -> None:
        """'show low stock' is low_stock, not inventory_query."""
        intent = classifier.classify("show low stock")
        assert intent.type == IntentType.LOW_STOCK
        assert intent.confidence == 0.9

    def test_inventory_query_without_low_words(self, classifier: IntentClassifier) -> None:
        """Listing words alone are an inventory query."""
        assert classifier.classify("show me the inventory").type == IntentType.INVENTORY_QUERY

    @pytest.mark.parametrize(
        "message", ["show me the lowest stock items", "show items with lowest quantity"]
    )
    def test_lowest_is_low_stock(self, classifier: IntentClassifier, message: str) -> None:
        """Words starting with "low" count as low-stock words."""
        assert classifier.classify(message).type == IntentType.LOW_STOCK

    def test_embedded_low_is_not_low_stock(self, classifier: IntentClassifier) -> None:
        """A "low" inside another word such as "slow" does not trigger low_stock."""
        assert classifier.classify("show slow movers").type == IntentType.INVENTORY_QUERY

    def test_greeting_checked_first(self, classifier: IntentClassifier) -> None:
        """A greeting wins even when later rules would also match."""
        assert classifier.classify("hello, show low stock").type == IntentType.GREETING

    def test_rule_table_order(self) -> None:
        """The rule table keeps its documented priority order."""
        assert [rule.intent for rule in DEFAULT_RULES] == [
            IntentType.GREETING,
            IntentType.LOW_STOCK,
            IntentType.INVENTORY_QUERY,
            IntentType.STOCK_CHECK,
            IntentType.MEDICINE_SEARCH,
            IntentType.CATEGORY_QUERY,
            IntentType.EXPIRY_CHECK,
            IntentType.REORDER_SUGGESTION,
            IntentType.ANALYTICS,
            IntentType.HELP,
            IntentType.CONVERSATIONAL,
        ]


class TestClassify:
    """Tests for individual intents."""

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("hi", IntentType.GREETING),
            ("good morning", IntentType.GREETING),
            ("which categories do we carry", IntentType.CATEGORY_QUERY),
            ("what is expiring soon", IntentType.EXPIRY_CHECK),
            ("give me reorder suggestions", IntentType.REORDER_SUGGESTION),
            ("analytics", IntentType.ANALYTICS),
            ("can you help me", IntentType.HELP),
            ("tell me a joke", IntentType.CONVERSATIONAL),
        ],
    )
    def test_intents(
        self, classifier: IntentClassifier, message: str, expected: IntentType
    ) -> None:
        """Representative messages map to their intent."""
        assert classifier.classify(message).type == expected

    def test_greeting_requires_word_boundary(self, classifier: IntentClassifier) -> None:
        """'history' does not start with the greeting 'hi'."""
        assert classifier.classify("history").type != IntentType.GREETING

    def test_stock_check_extracts_medicine(self, classifier: IntentClassifier) -> None:
        """Stock words plus a known name give stock_check with the name."""
        intent = classifier.classify("how much paracetamol is left")
        assert intent.type == IntentType.STOCK_CHECK
        assert intent.medicine == "paracetamol"

    def test_search_extracts_medicine(self, classifier: IntentClassifier) -> None:
        """Search words plus a known name give medicine_search."""
        intent = classifier.classify("find amoxicillin")
        assert intent.type == IntentType.MEDICINE_SEARCH
        assert intent.medicine == "amoxicillin"

    def test_search_without_name_falls_through(self, classifier: IntentClassifier) -> None:
        """A search word with nothing to search for is not medicine_search."""
        assert classifier.classify("find").type == IntentType.GENERAL

    def test_unknown_message_is_general(self, classifier: IntentClassifier) -> None:
        """Nothing matched yields general with confidence 0.5."""
        intent = classifier.classify("xyzzy")
        assert intent.type == IntentType.GENERAL
        assert intent.confidence == GENERAL_CONFIDENCE
        assert intent.medicine is None


class TestExtractMedicineName:
    """Tests for medicine-name extraction."""

    def test_common_name_anywhere(self, vocabulary: Vocabulary) -> None:
        """A curated name is found anywhere in the message."""
        assert extract_medicine_name("do we have insulin today", vocabulary) == "insulin"

    def test_verb_template(self, vocabulary: Vocabulary) -> None:
        """'locate <name>' captures the word after the verb."""
        assert extract_medicine_name("locate dolo", vocabulary) == "dolo"

    def test_noun_template(self, vocabulary: Vocabulary) -> None:
        """'<name> tablet' captures the words before the noun."""
        assert extract_medicine_name("zincovit tablet", vocabulary) == "zincovit"

    def test_too_short_candidate_rejected(self, vocabulary: Vocabulary) -> None:
        """Candidates under three characters are ignored."""
        assert extract_medicine_name("find ab", vocabulary) is None

    def test_no_candidate(self, vocabulary: Vocabulary) -> None:
        assert extract_medicine_name("good evening", vocabulary) is None
