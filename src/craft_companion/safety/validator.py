"""Safety gates applied before and after the AI call.

Three checks, each returning a plain value instead of raising:

``validate_request``
    Runs on the raw message before the AI is asked anything.  A message that
    mentions any blocked command token is refused outright.

``is_command_safe``
    Runs on the command the AI proposed.  The command must contain no
    blocked token anywhere *and* its verb must be on the safe list.  The
    blocked check wins: ``give Steve op`` is unsafe even though ``give`` is
    allowed.

``validate_build_size``
    Runs at dispatch time on area-filling commands.  Each ``fill`` is
    measured per axis and rejected when any axis spans more than
    ``build.max_extent`` blocks.

All matching is case-insensitive substring matching, so "stop" also matches
"don't stop".
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from craft_companion.knowledge.catalog import KnowledgeBase, default_knowledge_base

logger = logging.getLogger(__name__)

# Relative marker with an optional offset, or a plain integer literal.
_COORDINATE_PATTERN = re.compile(r"~(?:-?\d+)?|-?\d+")

# Two corners of three coordinates each.
_CORNER_VALUES = 6

DEFAULT_MAX_EXTENT = 50


@dataclass(slots=True)
class ValidationResult:
    """Outcome of the pre-request gate.

    Attributes:
        is_valid: True when the request may be sent to the AI.
        issues:   One human-readable reason per offending token.
    """

    is_valid: bool
    issues: list[str] = field(default_factory=list)


def _coordinates(command: str) -> list[int]:
    # A bare "~" is an offset of 0.
    return [int(token.lstrip("~") or 0) for token in _COORDINATE_PATTERN.findall(command)]


def _has_fill_token(command: str) -> bool:
    return any(token.lstrip("/") == "fill" for token in command.lower().split())


class SafetyValidator:
    """Blocked-token, allow-list and build-size checks."""

    def __init__(
        self,
        knowledge: KnowledgeBase | None = None,
        *,
        max_extent: int = DEFAULT_MAX_EXTENT,
    ) -> None:
        self._kb = knowledge or default_knowledge_base()
        self._max_extent = max_extent

    @property
    def max_extent(self) -> int:
        return self._max_extent

    def _blocked_tokens_in(self, text: str) -> list[str]:
        lowered = text.lower()
        return [token for token in self._kb.blocked_commands if token in lowered]

    def validate_request(self, raw: str) -> ValidationResult:
        """Refuse messages that mention a blocked command.

        Args:
            raw: The message text as received.

        Returns:
            ``ValidationResult`` with one issue per blocked token found.
        """
        found = self._blocked_tokens_in(raw)
        if found:
            logger.info("Request refused, blocked tokens: %s", ", ".join(found))
        return ValidationResult(
            is_valid=not found,
            issues=[f"Request contains blocked command: {token}" for token in found],
        )

    def is_command_safe(self, command: str) -> bool:
        """Return True if an AI-proposed command may be dispatched.

        A leading slash is ignored when reading the verb, so ``/give`` and
        ``give`` are the same command.
        """
        if self._blocked_tokens_in(command):
            return False
        parts = command.strip().lstrip("/").split()
        if not parts:
            return False
        return parts[0].lower() in self._kb.safe_commands

    def validate_build_size(self, commands: Iterable[str]) -> bool:
        """Check every ``fill`` command against the per-axis size limit.

        The first six coordinates of a ``fill`` command are read as two
        corners and the extent ``abs(b - a)`` is taken per axis.  ``~``
        prefixes are dropped, so relative coordinates are measured as
        offsets and a bare ``~`` counts as 0.  A ``fill`` with fewer than
        six coordinates cannot be measured and is rejected.

        Args:
            commands: Commands about to be dispatched together.

        Returns:
            False if any ``fill`` cannot be measured or spans more than
            ``max_extent`` on any axis.
        """
        for command in commands:
            if not _has_fill_token(command):
                continue
            values = _coordinates(command)
            if len(values) < _CORNER_VALUES:
                logger.warning("Fill without two full corners refused: %s", command)
                return False
            first, second = values[0:3], values[3:6]
            extents = [abs(b - a) for a, b in zip(first, second)]
            if max(extents) > self._max_extent:
                logger.warning(
                    "Build too large: extents %s exceed %d per axis (%s)",
                    extents,
                    self._max_extent,
                    command,
                )
                return False
        return True
