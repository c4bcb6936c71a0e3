"""Tests for the console backend."""

from __future__ import annotations

import io

import pytest

from craft_companion.config import ServerConfig
from craft_companion.core.pipeline import build_pipeline
from craft_companion.transport.console import ConsoleSession, parse_console_line, run_console
from tests.doubles import ScriptedRenderer


@pytest.mark.unit
class TestParseConsoleLine:
    def test_username_and_message(self) -> None:
        message = parse_console_line("Steve: @admin give me bread\n")
        assert message is not None
        assert message.username == "Steve"
        assert message.text == "@admin give me bread"

    def test_colon_inside_message_is_kept(self) -> None:
        message = parse_console_line("Steve: @admin time: night")
        assert message is not None
        assert message.text == "@admin time: night"

    @pytest.mark.parametrize("line", ["", "no separator", ": missing name", "Steve:   "])
    def test_rejects_incomplete_lines(self, line: str) -> None:
        assert parse_console_line(line) is None


@pytest.mark.integration
class TestRunConsole:
    @pytest.mark.asyncio
    async def test_prints_chat_and_commands(self, clock) -> None:
        out = io.StringIO()
        pipeline = build_pipeline(
            ServerConfig(),
            ConsoleSession("AI_Admin", out=out),
            renderer=ScriptedRenderer("CHAT: Sunny!\nCOMMAND: weather clear"),
            clock=clock,
            structures=[],
        )
        stdin = io.StringIO("Steve: @admin make the weather nice\nquit\nAlex: @admin ignored\n")

        assert await run_console(pipeline, stdin) == 0

        printed = out.getvalue().splitlines()
        assert printed[-2:] == ["<AI_Admin> Sunny!", "[command] /weather clear"]
        assert not any("Alex" in line for line in printed)
