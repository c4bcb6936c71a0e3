"""Tests for parse_response."""

from __future__ import annotations

import pytest

from craft_companion.interpret.parser import ParsedResponse, parse_response


@pytest.mark.unit
class TestTaggedReplies:
    def test_chat_and_command(self) -> None:
        parsed = parse_response("CHAT: Hi!\nCOMMAND: /give Steve diamond 1")
        assert parsed == ParsedResponse(chat="Hi!", command="/give Steve diamond 1")

    def test_chat_only(self) -> None:
        assert parse_response("CHAT: Have fun!") == ParsedResponse(chat="Have fun!", command="")

    def test_empty_command_tag(self) -> None:
        parsed = parse_response("CHAT: Sure thing\nCOMMAND:")
        assert parsed == ParsedResponse(chat="Sure thing", command="")

    def test_last_occurrence_wins(self) -> None:
        parsed = parse_response("CHAT: one\nCOMMAND: time set day\nCHAT: two\nCOMMAND: weather clear")
        assert parsed == ParsedResponse(chat="two", command="weather clear")

    def test_indented_lines_and_extra_text(self) -> None:
        parsed = parse_response("Sure!\n   CHAT:  Here you go  \n  COMMAND:  tp Alex 0 70 0 \nBye")
        assert parsed == ParsedResponse(chat="Here you go", command="tp Alex 0 70 0")

    def test_windows_line_endings(self) -> None:
        parsed = parse_response("CHAT: hi\r\nCOMMAND: time set day\r\n")
        assert parsed == ParsedResponse(chat="hi", command="time set day")


@pytest.mark.unit
class TestUntaggedReplies:
    def test_plain_text_becomes_chat(self) -> None:
        assert parse_response("Just a friendly note") == ParsedResponse(
            chat="Just a friendly note", command=""
        )

    def test_multi_line_plain_text(self) -> None:
        assert parse_response("  line one\nline two  ").chat == "line one\nline two"

    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_empty_input_never_raises(self, text: str) -> None:
        assert parse_response(text) == ParsedResponse(chat="", command="")

    def test_lower_case_tags_are_not_tags(self) -> None:
        assert parse_response("chat: hi").chat == "chat: hi"
