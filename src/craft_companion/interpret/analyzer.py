"""Request analyzer.

Extracts the things a child mentioned (items, animals, structures, colours,
numbers) plus a rough sentiment and urgency flag.  Everything is plain
substring containment on the lower-cased message; the only "tokenizing" is
the integer-literal scan for numbers.

Ordering
--------
The extracted name lists are deduplicated and ordered by where they first
appear in the message ("bread and an apple" → ``["bread", "apple"]``).
When two names start at the same position, the one found first in the
knowledge base wins the tie.

The ``Analysis`` is transient: it is built per message, used to compose the
prompt, and thrown away.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Literal

from craft_companion.interpret.intent import Intent, categorize
from craft_companion.knowledge.catalog import KnowledgeBase, default_knowledge_base

Sentiment = Literal["polite", "excited", "questioning", "neutral"]

# Words children use for items, mapped onto a real item id.  Applied after
# the catalog scan.
SLANG_ITEMS: dict[str, str] = {
    "sword": "diamond_sword",
    "pickaxe": "diamond_pickaxe",
    "diamonds": "diamond",
    "food": "bread",
    "armor": "diamond_chestplate",
    "helmet": "diamond_helmet",
    "boots": "diamond_boots",
}

COLORS: tuple[str, ...] = (
    "red",
    "blue",
    "green",
    "yellow",
    "purple",
    "pink",
    "orange",
    "white",
    "black",
    "gray",
    "brown",
)

URGENCY_WORDS: tuple[str, ...] = ("quick", "fast", "now", "urgent", "help!", "emergency")

_NUMBER_PATTERN = re.compile(r"\d+")


def _contains_any(*words: str) -> Callable[[str], bool]:
    return lambda text: any(word in text for word in words)


# Ordered (predicate, label) cascade; first match wins.
SENTIMENT_RULES: tuple[tuple[Callable[[str], bool], Sentiment], ...] = (
    (_contains_any("please", "help"), "polite"),
    (_contains_any("!", "awesome", "cool"), "excited"),
    (_contains_any("can you", "could you"), "questioning"),
)


@dataclass(slots=True)
class Analysis:
    """What the analyzer found in one message.

    Attributes:
        intent:     Coarse intent from the classifier.
        items:      Item ids mentioned (catalog names or slang).
        animals:    Entity ids mentioned.
        structures: Structure types mentioned.
        colors:     Colours mentioned.
        numbers:    Every integer literal, left to right.
        sentiment:  Rough tone of the message.
        urgency:    True if any urgency word was used.
    """

    intent: Intent
    items: list[str] = field(default_factory=list)
    animals: list[str] = field(default_factory=list)
    structures: list[str] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)
    numbers: list[int] = field(default_factory=list)
    sentiment: Sentiment = "neutral"
    urgency: bool = False


def _ordered_unique(hits: Iterable[tuple[int, str]]) -> list[str]:
    """Sort ``(position, name)`` hits by position (stable) and drop repeats."""
    seen: set[str] = set()
    ordered: list[str] = []
    for _position, name in sorted(hits, key=lambda hit: hit[0]):
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def _first_position(text: str, *needles: str) -> int:
    """Return the earliest index of any needle in ``text``, or -1."""
    positions = [index for index in (text.find(needle) for needle in needles) if index >= 0]
    return min(positions) if positions else -1


class RequestAnalyzer:
    """Extracts structured hints from a message using the knowledge base."""

    def __init__(self, knowledge: KnowledgeBase | None = None) -> None:
        self._kb = knowledge or default_knowledge_base()

    def analyze(self, message: str, intent: Intent | None = None) -> Analysis:
        """Analyze a message.

        Args:
            message: Raw message text; lower-cased here.
            intent:  Intent already computed by the caller, if any.

        Returns:
            A fresh ``Analysis``.
        """
        text = message.lower()
        return Analysis(
            intent=intent or categorize(text),
            items=self.extract_items(text),
            animals=self.extract_animals(text),
            structures=self.extract_structures(text),
            colors=self.extract_colors(text),
            numbers=self.extract_numbers(text),
            sentiment=self.analyze_sentiment(text),
            urgency=self.analyze_urgency(text),
        )

    def extract_items(self, text: str) -> list[str]:
        hits: list[tuple[int, str]] = []
        for item in self._kb.all_items():
            position = _first_position(text, item, item.replace("_", " "))
            if position >= 0:
                hits.append((position, item))
        for term, item in SLANG_ITEMS.items():
            position = text.find(term)
            if position >= 0:
                hits.append((position, item))
        return _ordered_unique(hits)

    def extract_animals(self, text: str) -> list[str]:
        hits = []
        for entity in self._kb.entities:
            position = _first_position(text, entity, f"{entity}s")
            if position >= 0:
                hits.append((position, entity))
        return _ordered_unique(hits)

    def extract_structures(self, text: str) -> list[str]:
        return _ordered_unique(
            (text.find(structure), structure)
            for structure in self._kb.structures
            if structure in text
        )

    def extract_colors(self, text: str) -> list[str]:
        return _ordered_unique((text.find(color), color) for color in COLORS if color in text)

    def extract_numbers(self, text: str) -> list[int]:
        return [int(match) for match in _NUMBER_PATTERN.findall(text)]

    def analyze_sentiment(self, text: str) -> Sentiment:
        for predicate, label in SENTIMENT_RULES:
            if predicate(text):
                return label
        return "neutral"

    def analyze_urgency(self, text: str) -> bool:
        return any(word in text for word in URGENCY_WORDS)
