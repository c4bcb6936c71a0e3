"""Tests for structure matching and discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from craft_companion.interpret.structures import StructureMatcher, discover_structures


@pytest.fixture
def matcher(kb) -> StructureMatcher:
    return StructureMatcher(kb)


@pytest.mark.unit
class TestMatchCascade:
    def test_alias_keyword(self, matcher) -> None:
        available = ["bear_habitat", "lion_den"]
        assert matcher.match("can I get a bear habitat", available) == "bear_habitat"

    def test_exact_name_wins_over_alias(self, matcher) -> None:
        available = ["bear_habitat", "bear_pen"]
        assert matcher.match("build the bear_pen please", available) == "bear_pen"

    def test_alias_candidates_in_declared_order(self, matcher) -> None:
        # bear_habitat is not installed; bear_pen is next in the alias list.
        available = ["bear_enclosure", "bear_pen"]
        assert matcher.match("something for the bear", available) == "bear_pen"

    def test_token_fallback(self, matcher) -> None:
        assert matcher.match("I want a castle", ["stone-castle", "windmill"]) == "stone-castle"

    def test_short_tokens_ignored(self, matcher) -> None:
        assert matcher.match("a big one", ["big_hut"]) is None

    def test_no_match(self, matcher) -> None:
        assert matcher.match("build a spaceship", ["bear_habitat"]) is None

    def test_no_structures_available(self, matcher) -> None:
        assert matcher.match("bear habitat", []) is None

    def test_case_insensitive_and_returns_available_spelling(self, matcher) -> None:
        assert matcher.match("LION DEN time", ["Lion_Den"]) == "Lion_Den"


@pytest.mark.unit
class TestDiscoverStructures:
    def test_lists_sorted_lower_cased_stems(self, tmp_path: Path) -> None:
        (tmp_path / "Lion_Den.mcstructure").write_bytes(b"")
        (tmp_path / "bear_habitat.mcstructure").write_bytes(b"")
        (tmp_path / "notes.txt").write_text("ignore me")
        (tmp_path / "nested.mcstructure").mkdir()

        assert discover_structures(tmp_path) == ["bear_habitat", "lion_den"]

    def test_custom_extension(self, tmp_path: Path) -> None:
        (tmp_path / "castle.nbt").write_bytes(b"")
        assert discover_structures(tmp_path, ".nbt") == ["castle"]

    def test_missing_directory_is_empty(self, tmp_path: Path) -> None:
        assert discover_structures(tmp_path / "absent") == []
