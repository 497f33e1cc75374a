"""Keyword vocabulary used for medicine-name extraction."""

from dataclasses import dataclass

from pharmaventory.core.config import Settings, settings


@dataclass(frozen=True)
class Vocabulary:
    """Curated word lists, loaded from settings so deployments can extend them.

    Attributes:
        common_medicines: Generic names recognised anywhere in a message
        brand_medicines: Brand names, used only for retrieval keywords
        stop_words: Query words never treated as retrieval keywords
    """

    common_medicines: tuple[str, ...]
    brand_medicines: tuple[str, ...]
    stop_words: frozenset[str]

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "Vocabulary":
        return cls(
            common_medicines=tuple(m.lower() for m in config.chat_common_medicines),
            brand_medicines=tuple(m.lower() for m in config.chat_brand_medicines),
            stop_words=frozenset(w.lower() for w in config.chat_stop_words),
        )

    @property
    def retrieval_medicines(self) -> tuple[str, ...]:
        return self.common_medicines + self.brand_medicines
