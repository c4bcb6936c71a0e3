"""Typed exceptions for startup-time failures.

Per-message failures (blocked tokens, unsafe commands, AI outages) are never
raised: they are ordinary return values handled inside the chat pipeline.
The exceptions below only cover problems that should stop the process
before it starts serving children, such as an unreadable knowledge file.
"""

from __future__ import annotations


class CraftCompanionError(RuntimeError):
    """Base exception for Craft Companion startup failures."""


class ConfigurationError(CraftCompanionError):
    """Configuration values are missing or out of range.

    Args:
        problems: Human-readable description of every invalid value.
    """

    def __init__(self, problems: list[str]) -> None:
        super().__init__("; ".join(problems) or "invalid configuration")
        self.problems = problems


class KnowledgeBaseError(CraftCompanionError):
    """The knowledge data file is missing a category or is malformed."""
