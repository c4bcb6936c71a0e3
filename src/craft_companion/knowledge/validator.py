"""Membership checks and suggestions against the knowledge base.

Every lookup is a plain linear scan of one category, so the cost is
proportional to the category size.  Names are compared case-insensitively;
the knowledge base stores them lower-cased.
"""

from __future__ import annotations

import random

from craft_companion.knowledge.catalog import KnowledgeBase, default_knowledge_base


class KnowledgeValidator:
    """Answers "does this exist?" questions for the rest of the pipeline.

    Attributes:
        _kb: The immutable knowledge base being queried.
    """

    def __init__(self, knowledge: KnowledgeBase | None = None) -> None:
        self._kb = knowledge or default_knowledge_base()

    @property
    def knowledge(self) -> KnowledgeBase:
        """Return the knowledge base this validator reads from."""
        return self._kb

    def is_valid_item(self, item: str) -> bool:
        return item.lower() in self._kb.all_items()

    def is_valid_entity(self, entity: str) -> bool:
        return entity.lower() in self._kb.entities

    def is_valid_command(self, command: str) -> bool:
        return command.lower() in self._kb.safe_commands

    def is_blocked_command(self, command: str) -> bool:
        return command.lower() in self._kb.blocked_commands

    def suggest_similar_item(self, requested_item: str) -> str | None:
        """Suggest a catalog item for a token that is not an exact item id.

        Returns the first catalog item that contains the requested token or
        is contained in it ("sword" → ``diamond_sword``, "diamonds" →
        ``diamond``).  This is containment matching, not edit-distance fuzzy
        matching, so catalog order decides which of several hits wins.

        Args:
            requested_item: Raw token from the child's message.

        Returns:
            The first matching item id, or ``None`` when nothing matches.
        """
        token = requested_item.lower().strip()
        if not token:
            return None
        for item in self._kb.all_items():
            if token in item or item in token:
                return item
        return None

    def items_in_category(self, category: str) -> tuple[str, ...]:
        return self._kb.items.get(category.lower(), ())

    def random_item_from_category(
        self, category: str, rng: random.Random | None = None
    ) -> str | None:
        """Pick one item from a category, or ``None`` for an unknown category."""
        items = self.items_in_category(category)
        if not items:
            return None
        return (rng or random).choice(items)

    def building_materials_for_type(self, material_type: str) -> tuple[str, ...]:
        return self._kb.building_materials.get(material_type.lower(), ())

    def animals_for_habitat(self, habitat: str) -> tuple[str, ...]:
        return self._kb.animal_habitats.get(habitat.lower(), ())
