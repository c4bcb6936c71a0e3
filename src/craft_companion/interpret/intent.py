"""Keyword intent classifier.

Maps a child's message to one coarse intent.  The classifier is an ordered
list of rules evaluated top-down; the first rule with a keyword contained in
the lower-cased message wins.  There is no statistical matching, so the
result for a given message never changes between runs.

Rule order (highest priority first)::

    build > give > teleport > gamemode > time > weather > help > generic

"can you build me a castle and give me a sword" is therefore ``build``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Intent = Literal["build", "give", "teleport", "gamemode", "time", "weather", "help", "generic"]

GENERIC: Intent = "generic"


@dataclass(frozen=True, slots=True)
class IntentRule:
    """One (predicate, label) pair of the classifier cascade.

    Attributes:
        intent:   Label returned when the rule matches.
        keywords: Substrings that trigger the rule (lower-case).
    """

    intent: Intent
    keywords: tuple[str, ...]

    def matches(self, lowered: str) -> bool:
        """Return True if any keyword occurs in the already lower-cased text."""
        return any(keyword in lowered for keyword in self.keywords)


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule("build", ("build", "create", "make", "construct")),
    IntentRule("give", ("give", "item", "diamond", "sword")),
    IntentRule("teleport", ("teleport", "tp", "come", "here")),
    IntentRule("gamemode", ("gamemode", "creative", "survival")),
    IntentRule("time", ("time", "day", "night")),
    IntentRule("weather", ("weather", "rain", "sun")),
    IntentRule("help", ("help", "commands", "what can you do")),
)


def categorize(text: str, rules: tuple[IntentRule, ...] = INTENT_RULES) -> Intent:
    """Classify a message into a coarse intent.

    Args:
        text:  Raw message text (any case).
        rules: Ordered rule cascade; defaults to ``INTENT_RULES``.

    Returns:
        The intent of the first matching rule, or ``"generic"``.
    """
    lowered = text.lower()
    for rule in rules:
        if rule.matches(lowered):
            return rule.intent
    return GENERIC
