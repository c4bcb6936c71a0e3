"""Knowledge base loader.

The knowledge base is the static allow-list the assistant validates against:
which items, entities, game modes and commands exist, which commands are
never allowed, and how free-text words map onto structure assets.  It is
*not* a live view of the game world.

The data lives in ``knowledge/data/knowledge.yaml`` inside the package and
is loaded once.  After loading, every category is a tuple (or a read-only
mapping of tuples), so runtime code cannot mutate it.  Declaration order in
the YAML file is preserved; it decides tie-breaks in every lookup that can
match more than one entry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from hashlib import sha256
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from craft_companion.errors import KnowledgeBaseError

DEFAULT_KNOWLEDGE_PATH = Path(__file__).parent / "data" / "knowledge.yaml"

# Order in which item categories are flattened into the full catalog.
ITEM_CATEGORIES: tuple[str, ...] = ("tools", "armor", "blocks", "food", "special")


@dataclass(frozen=True, slots=True)
class KnowledgeBase:
    """Immutable reference data.

    Attributes:
        items:              Item category name → item ids.
        entities:           Valid mob/entity ids.
        game_modes:         Valid game mode names.
        weather:            Valid weather types.
        time_settings:      Valid named times of day.
        structures:         Structure types children commonly ask for.
        animal_habitats:    Habitat name → animals that live there.
        safe_commands:      Command verbs the AI is allowed to produce.
        blocked_commands:   Command tokens that are never allowed.
        building_materials: Material category → material names.
        structure_aliases:  Keyword → ordered candidate structure asset names.
        content_hash:       Deterministic hash of the source payload.
        version:            Data file version string when available.
    """

    items: Mapping[str, tuple[str, ...]]
    entities: tuple[str, ...]
    game_modes: tuple[str, ...]
    weather: tuple[str, ...]
    time_settings: tuple[str, ...]
    structures: tuple[str, ...]
    animal_habitats: Mapping[str, tuple[str, ...]]
    safe_commands: tuple[str, ...]
    blocked_commands: tuple[str, ...]
    building_materials: Mapping[str, tuple[str, ...]]
    structure_aliases: Mapping[str, tuple[str, ...]]
    content_hash: str = ""
    version: str | None = None

    def all_items(self) -> tuple[str, ...]:
        """Return the full item catalog in category, then declaration, order."""
        return tuple(item for category in ITEM_CATEGORIES for item in self.items.get(category, ()))


def load_knowledge_base(path: Path | None = None) -> KnowledgeBase:
    """Load and freeze the knowledge base from a YAML file.

    Args:
        path: YAML file to read.  Defaults to the packaged data file.

    Returns:
        A fully-populated, immutable ``KnowledgeBase``.

    Raises:
        KnowledgeBaseError: If the file is missing or a required category is
            absent or has the wrong shape.
    """
    source = path or DEFAULT_KNOWLEDGE_PATH
    if not source.exists():
        raise KnowledgeBaseError(f"knowledge file not found: {source}")

    with source.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise KnowledgeBaseError(f"knowledge file must contain a mapping: {source}")

    items = _read_mapping(payload, "items")
    missing = [category for category in ITEM_CATEGORIES if category not in items]
    if missing:
        raise KnowledgeBaseError(f"item categories missing: {', '.join(missing)}")

    commands = payload.get("commands")
    if not isinstance(commands, dict):
        raise KnowledgeBaseError("knowledge key 'commands' must be a mapping")

    return KnowledgeBase(
        items=items,
        entities=_read_list(payload, "entities"),
        game_modes=_read_list(payload, "game_modes"),
        weather=_read_list(payload, "weather"),
        time_settings=_read_list(payload, "time_settings"),
        structures=_read_list(payload, "structures"),
        animal_habitats=_read_mapping(payload, "animal_habitats"),
        safe_commands=_read_list(commands, "safe"),
        blocked_commands=_read_list(commands, "blocked"),
        building_materials=_read_mapping(payload, "building_materials"),
        structure_aliases=_read_mapping(payload, "structure_aliases"),
        content_hash=_hash_payload(payload),
        version=str(payload["version"]) if payload.get("version") is not None else None,
    )


@lru_cache(maxsize=1)
def default_knowledge_base() -> KnowledgeBase:
    """Return the packaged knowledge base, loaded once per process."""
    return load_knowledge_base()


def _read_list(payload: Mapping[str, Any], key: str) -> tuple[str, ...]:
    """Read a list of names as a lower-cased tuple."""
    value = payload.get(key)
    if not isinstance(value, list):
        raise KnowledgeBaseError(f"knowledge key {key!r} must be a list")
    return tuple(str(entry).lower() for entry in value)


def _read_mapping(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Read a mapping of name → list of names as a read-only mapping of tuples."""
    value = payload.get(key)
    if not isinstance(value, dict):
        raise KnowledgeBaseError(f"knowledge key {key!r} must be a mapping")
    frozen: dict[str, Any] = {}
    for name, entries in value.items():
        if not isinstance(entries, list):
            raise KnowledgeBaseError(f"knowledge entry {key}.{name} must be a list")
        frozen[str(name).lower()] = tuple(str(entry).lower() for entry in entries)
    return MappingProxyType(frozen)


def _hash_payload(payload: dict[str, Any]) -> str:
    """Compute a deterministic hash for the knowledge payload."""
    serialized = yaml.safe_dump(payload, sort_keys=True)
    return sha256(serialized.encode("utf-8")).hexdigest()
