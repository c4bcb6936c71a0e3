"""Structure-name matching and structure asset discovery.

A structure is a pre-built asset (``bear_habitat.mcstructure``) that can be
loaded into the world.  ``StructureMatcher.match`` resolves free text such as
"can I get a bear habitat" to one of the available structure names.

Matching cascade (first success wins)
-------------------------------------
1. **Exact name**: an available name occurs verbatim in the text.
2. **Alias**: a knowledge-base alias keyword ("bear") occurs in the text;
   its candidate list is walked in order and the first available name wins.
3. **Token**: an available name split on ``_``, ``-`` or spaces has a
   token longer than three characters that occurs in the text.
4. Otherwise ``None``.

Available names are tried in the order the caller iterates them, so pass an
ordered collection (``discover_structures`` returns a sorted list) when the
result must be reproducible.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from craft_companion.knowledge.catalog import KnowledgeBase, default_knowledge_base

logger = logging.getLogger(__name__)

_NAME_SEPARATORS = re.compile(r"[_\- ]+")

# Tokens of this length or shorter are too generic to identify a structure.
_MIN_TOKEN_LENGTH = 3


class StructureMatcher:
    """Resolves a request to an available structure name."""

    def __init__(self, knowledge: KnowledgeBase | None = None) -> None:
        self._aliases = (knowledge or default_knowledge_base()).structure_aliases

    def match(self, text: str, available: Iterable[str]) -> str | None:
        """Return the structure the text asks for, or ``None``.

        Args:
            text:      Free-text request (any case).
            available: Names of the structures that can actually be loaded.

        Returns:
            One of the names in ``available`` or ``None``.
        """
        lowered = text.lower()
        names = list(available)
        if not names:
            return None
        by_lower = {name.lower(): name for name in names}

        for name in names:
            if name.lower() in lowered:
                return name

        for alias, candidates in self._aliases.items():
            if alias not in lowered:
                continue
            for candidate in candidates:
                if candidate in by_lower:
                    return by_lower[candidate]

        for name in names:
            tokens = _NAME_SEPARATORS.split(name.lower())
            if any(len(token) > _MIN_TOKEN_LENGTH and token in lowered for token in tokens):
                return name

        return None


def discover_structures(directory: Path, extension: str = ".mcstructure") -> list[str]:
    """List the structure assets in a directory.

    Names are the lower-cased file stems, sorted.  A missing directory is
    not an error; it simply means no structures are installed.

    Args:
        directory: Folder holding structure files.
        extension: File suffix that marks a structure asset.

    Returns:
        Sorted structure names.
    """
    if not directory.is_dir():
        logger.info("No structure directory at %s; structure matching disabled.", directory)
        return []
    suffix = extension.lower()
    names = sorted(
        path.stem.lower()
        for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() == suffix
    )
    logger.info("Loaded %d structure files from %s", len(names), directory)
    return names
