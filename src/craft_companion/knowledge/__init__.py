"""Static knowledge base and the validator that queries it."""

from craft_companion.knowledge.catalog import (
    KnowledgeBase,
    default_knowledge_base,
    load_knowledge_base,
)
from craft_companion.knowledge.validator import KnowledgeValidator

__all__ = ["KnowledgeBase", "KnowledgeValidator", "default_knowledge_base", "load_knowledge_base"]
