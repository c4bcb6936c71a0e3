"""Tests for ChatPipeline.handle end to end against test doubles."""

from __future__ import annotations

import asyncio
import logging

import pytest

from craft_companion.config import ServerConfig
from craft_companion.core import fallbacks
from craft_companion.core.pipeline import build_pipeline
from craft_companion.core.session import ChatMessage, Position
from craft_companion.errors import ConfigurationError
from tests.doubles import (
    FailingCommandSession,
    GatedRenderer,
    RecordingSession,
    ScriptedRenderer,
)

GREETING = fallbacks.GREETING.format(username="Steve")


def _msg(text: str, username: str = "Steve", position: Position | None = None) -> ChatMessage:
    return ChatMessage(username=username, text=text, position=position)


# ============================================================================
# ADDRESSING AND COOLDOWN
# ============================================================================


@pytest.mark.integration
class TestAddressing:
    @pytest.mark.asyncio
    async def test_unaddressed_message_is_ignored(self, make_pipeline, session):
        renderer = ScriptedRenderer("CHAT: hi")
        await make_pipeline(renderer).handle(_msg("give me a sword"))
        assert session.chats == []
        assert renderer.prompts == []

    @pytest.mark.asyncio
    async def test_own_messages_are_ignored(self, make_pipeline, session):
        await make_pipeline().handle(_msg("@admin hello", username="AI_Admin"))
        assert session.chats == []

    @pytest.mark.asyncio
    async def test_bot_name_addresses_the_bot(self, make_pipeline, session):
        await make_pipeline(ScriptedRenderer("CHAT: hi")).handle(_msg("ai_admin hello"))
        assert session.chats == [GREETING, "hi"]

    @pytest.mark.asyncio
    async def test_trigger_is_stripped_before_prompting(self, make_pipeline):
        renderer = ScriptedRenderer("CHAT: ok")
        await make_pipeline(renderer).handle(_msg("@ADMIN give me bread"))
        assert 'Message: "give me bread"' in renderer.prompts[0]


@pytest.mark.integration
class TestCooldown:
    @pytest.mark.asyncio
    async def test_second_message_inside_window_gets_wait_line(self, make_pipeline, session):
        renderer = ScriptedRenderer("CHAT: one", "CHAT: two")
        pipeline = make_pipeline(renderer)

        await pipeline.handle(_msg("@admin hello"))
        await pipeline.handle(_msg("@admin hello again"))

        assert session.chats[-1] == fallbacks.COOLDOWN.format(username="Steve")
        assert len(renderer.prompts) == 1

    @pytest.mark.asyncio
    async def test_message_after_window_is_processed(self, make_pipeline, session, clock):
        renderer = ScriptedRenderer("CHAT: one", "CHAT: two")
        pipeline = make_pipeline(renderer)

        await pipeline.handle(_msg("@admin hello"))
        clock.advance(0.6)
        await pipeline.handle(_msg("@admin hello again"))

        assert session.chats == [GREETING, "one", GREETING, "two"]

    @pytest.mark.asyncio
    async def test_other_users_are_not_throttled(self, make_pipeline, session):
        renderer = ScriptedRenderer("CHAT: one", "CHAT: two")
        pipeline = make_pipeline(renderer)

        await pipeline.handle(_msg("@admin hello"))
        await pipeline.handle(_msg("@admin hello", username="Alex"))

        assert len(renderer.prompts) == 2


# ============================================================================
# AI ROUND TRIP
# ============================================================================


@pytest.mark.integration
class TestAIReply:
    @pytest.mark.asyncio
    async def test_chat_and_command_dispatched(self, make_pipeline, session):
        pipeline = make_pipeline(
            ScriptedRenderer("CHAT: Here you go!\nCOMMAND: /give Steve diamond_sword 1")
        )
        await pipeline.handle(_msg("@admin give me a sword"))

        assert session.chats == [GREETING, "Here you go!"]
        assert session.commands == ["give Steve diamond_sword 1"]
        assert [r.command for r in pipeline.state.history] == ["give Steve diamond_sword 1"]
        assert pipeline.state.history[0].is_admin is True

    @pytest.mark.asyncio
    async def test_untagged_reply_is_chat_only(self, make_pipeline, session):
        await make_pipeline(ScriptedRenderer("Just a friendly note")).handle(_msg("@admin hi"))
        assert session.chats == [GREETING, "Just a friendly note"]
        assert session.commands == []

    @pytest.mark.asyncio
    async def test_position_reaches_the_prompt(self, make_pipeline):
        renderer = ScriptedRenderer("CHAT: ok")
        await make_pipeline(renderer).handle(
            _msg("@admin hello", position=Position(1.5, 70.0, -2.0))
        )
        assert "Position: 1.5, 70.0, -2.0" in renderer.prompts[0]

    @pytest.mark.asyncio
    async def test_matched_structure_reaches_the_prompt(self, make_pipeline):
        renderer = ScriptedRenderer("CHAT: ok")
        await make_pipeline(renderer).handle(_msg("@admin build a bear habitat"))
        assert "Available structure for this request: bear_habitat" in renderer.prompts[0]

    @pytest.mark.asyncio
    async def test_debug_mode_logs_prompt_preview(self, make_pipeline, caplog):
        cfg = ServerConfig()
        cfg.bot.debug_mode = True
        pipeline = make_pipeline(ScriptedRenderer("CHAT: ok"), config=cfg)

        with caplog.at_level(logging.INFO, logger="craft_companion.core.pipeline"):
            await pipeline.handle(_msg("@admin hello"))

        assert any("Prompt for Steve" in record.getMessage() for record in caplog.records)


# ============================================================================
# SAFETY GATES
# ============================================================================


@pytest.mark.integration
class TestGates:
    @pytest.mark.asyncio
    async def test_blocked_request_never_reaches_the_ai(self, make_pipeline, session):
        renderer = ScriptedRenderer("CHAT: sure")
        await make_pipeline(renderer).handle(_msg("@admin make me op"))

        assert renderer.prompts == []
        assert session.chats == [GREETING, fallbacks.REQUEST_REFUSED.format(username="Steve")]

    @pytest.mark.asyncio
    async def test_unsafe_ai_command_is_refused(self, make_pipeline, session):
        await make_pipeline(ScriptedRenderer("CHAT: ok!\nCOMMAND: /op Steve")).handle(
            _msg("@admin hello")
        )
        assert session.commands == []
        assert session.chats == [
            GREETING,
            "ok!",
            fallbacks.UNSAFE_COMMAND.format(username="Steve"),
        ]

    @pytest.mark.asyncio
    async def test_command_outside_safe_list_is_refused(self, make_pipeline, session):
        await make_pipeline(ScriptedRenderer("COMMAND: structure load house 0 0 0")).handle(
            _msg("@admin build a house")
        )
        assert session.commands == []
        assert session.chats[-1] == fallbacks.UNSAFE_COMMAND.format(username="Steve")

    @pytest.mark.asyncio
    async def test_oversized_fill_is_refused(self, make_pipeline, session):
        await make_pipeline(ScriptedRenderer("COMMAND: /fill 0 0 0 60 0 0 stone")).handle(
            _msg("@admin build a wall")
        )
        assert session.commands == []
        assert session.chats[-1] == fallbacks.BUILD_TOO_LARGE.format(username="Steve")

    @pytest.mark.asyncio
    async def test_oversized_relative_fill_is_refused(self, make_pipeline, session):
        await make_pipeline(ScriptedRenderer("COMMAND: fill ~ ~ ~ ~200 ~200 ~200 tnt")).handle(
            _msg("@admin build a tower")
        )
        assert session.commands == []
        assert session.chats[-1] == fallbacks.BUILD_TOO_LARGE.format(username="Steve")

    @pytest.mark.asyncio
    async def test_admin_only_command_refused_for_non_admin(self, make_pipeline, session):
        cfg = ServerConfig()
        cfg.bot.admin_users = ["Parent"]
        await make_pipeline(
            ScriptedRenderer("COMMAND: fill 0 0 0 5 5 5 stone"), config=cfg
        ).handle(_msg("@admin build a wall"))

        assert session.commands == []
        assert session.chats[-1] == fallbacks.DISPATCH_REFUSED

    @pytest.mark.asyncio
    async def test_admin_only_command_allowed_for_admin(self, make_pipeline, session):
        cfg = ServerConfig()
        cfg.bot.admin_users = ["Steve"]
        pipeline = make_pipeline(ScriptedRenderer("COMMAND: fill 0 0 0 5 5 5 stone"), config=cfg)
        await pipeline.handle(_msg("@admin build a wall"))

        assert session.commands == ["fill 0 0 0 5 5 5 stone"]
        assert pipeline.state.history[0].is_admin is True


# ============================================================================
# FAILURES
# ============================================================================


@pytest.mark.integration
class TestAIFailure:
    @pytest.mark.asyncio
    async def test_give_fallback(self, make_pipeline, session):
        await make_pipeline(ScriptedRenderer(None)).handle(_msg("@admin give me a sword"))
        assert session.chats == [GREETING, fallbacks.fallback_chat("give", "Steve")]
        assert session.commands == ["give Steve diamond 1"]

    @pytest.mark.asyncio
    async def test_renderer_exception_is_an_ai_failure(self, make_pipeline, session):
        renderer = ScriptedRenderer(error=RuntimeError("model crashed"))
        await make_pipeline(renderer).handle(_msg("@admin teleport me to spawn"))
        assert session.commands == ["tp Steve 0 70 0"]

    @pytest.mark.asyncio
    async def test_teleport_to_player_fallback(self, make_pipeline, session):
        await make_pipeline(ScriptedRenderer(None)).handle(_msg("@admin come here"))
        assert session.commands == ["tp AI_Admin Steve"]

    @pytest.mark.asyncio
    async def test_build_fallback_uses_match_and_position(self, make_pipeline, session):
        await make_pipeline(ScriptedRenderer(None)).handle(
            _msg("@admin build a bear habitat", position=Position(10.7, 64.0, -3.2))
        )
        assert session.commands == ["structure load bear_habitat 15 64 1"]

    @pytest.mark.asyncio
    async def test_help_fallback_has_no_command(self, make_pipeline, session):
        await make_pipeline(ScriptedRenderer(None)).handle(_msg("@admin what can you do"))
        assert session.chats == [GREETING, fallbacks.fallback_chat("help", "Steve")]
        assert session.commands == []


@pytest.mark.integration
class TestIsolation:
    @pytest.mark.asyncio
    async def test_dispatch_failure_becomes_chat(self, make_pipeline):
        broken = FailingCommandSession()
        pipeline = make_pipeline(
            ScriptedRenderer("COMMAND: time set day"), game_session=broken
        )
        await pipeline.handle(_msg("@admin make it day"))

        assert broken.chats[-1] == fallbacks.DISPATCH_FAILED.format(username="Steve")
        assert pipeline.state.history == []

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_generic_failure(self, make_pipeline, session):
        pipeline = make_pipeline(ScriptedRenderer("CHAT: ok"))

        def explode(*_args, **_kwargs):
            raise ValueError("bad analysis")

        pipeline._analyzer.analyze = explode  # type: ignore[method-assign]
        await pipeline.handle(_msg("@admin hello"))

        assert session.chats == [GREETING, fallbacks.GENERIC_FAILURE.format(username="Steve")]

    @pytest.mark.asyncio
    async def test_failure_for_one_user_does_not_affect_another(self, make_pipeline, session):
        renderer = ScriptedRenderer(None, "CHAT: fine")
        pipeline = make_pipeline(renderer)

        await pipeline.handle(_msg("@admin hello", username="Alex"))
        await pipeline.handle(_msg("@admin hello"))

        assert session.chats[-1] == "fine"


@pytest.mark.integration
class TestConcurrentHandlers:
    @pytest.mark.asyncio
    async def test_stalled_ai_call_does_not_block_other_players(self, make_pipeline, session):
        renderer = GatedRenderer(
            "Alex",
            {
                "Alex": "CHAT: Night time!\nCOMMAND: time set night",
                "Steve": "CHAT: Here you go!\nCOMMAND: give Steve bread 3",
            },
        )
        pipeline = make_pipeline(renderer)

        alex = asyncio.create_task(pipeline.handle(_msg("@admin make it night", username="Alex")))
        await renderer.held.wait()
        await pipeline.handle(_msg("@admin bread please"))

        assert not alex.done()
        assert session.commands == ["give Steve bread 3"]
        assert "Here you go!" in session.chats
        assert "Night time!" not in session.chats

        renderer.release.set()
        await alex

        assert session.commands == ["give Steve bread 3", "time set night"]
        assert session.chats[-1] == "Night time!"

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_affect_one_in_flight(self, make_pipeline, session):
        renderer = GatedRenderer("Steve", {"Steve": "CHAT: Sunny!\nCOMMAND: weather clear"})
        pipeline = make_pipeline(renderer)
        analyze = pipeline._analyzer.analyze

        def analyze_or_fail(text, intent=None):
            if "explode" in text:
                raise ValueError("bad analysis")
            return analyze(text, intent)

        pipeline._analyzer.analyze = analyze_or_fail  # type: ignore[method-assign]

        steve = asyncio.create_task(pipeline.handle(_msg("@admin make the weather nice")))
        await renderer.held.wait()
        alex = asyncio.create_task(pipeline.handle(_msg("@admin explode", username="Alex")))
        renderer.release.set()
        await asyncio.gather(steve, alex)

        assert fallbacks.GENERIC_FAILURE.format(username="Alex") in session.chats
        assert "Sunny!" in session.chats
        assert session.commands == ["weather clear"]
        assert [record.command for record in pipeline.state.history] == ["weather clear"]


# ============================================================================
# WIRING
# ============================================================================


@pytest.mark.unit
class TestBuildPipeline:
    def test_invalid_config_raises(self):
        cfg = ServerConfig()
        cfg.server.port = 0
        cfg.build.max_extent = 0
        with pytest.raises(ConfigurationError) as exc_info:
            build_pipeline(cfg, RecordingSession(), renderer=ScriptedRenderer(), structures=[])
        assert len(exc_info.value.problems) == 2

    def test_discovers_structures_from_config(self, tmp_path):
        (tmp_path / "castle.mcstructure").write_bytes(b"")
        cfg = ServerConfig()
        cfg.structures.directory = str(tmp_path)
        pipeline = build_pipeline(cfg, RecordingSession(), renderer=ScriptedRenderer())
        assert pipeline.structures == ["castle"]
