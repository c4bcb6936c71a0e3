"""
Shared pytest fixtures for the Craft Companion test suite.

This module provides fixtures that are automatically available to all test files:
- The packaged knowledge base
- A recording GameSession that captures chat lines and commands
- A scripted AI renderer and a controllable clock
- A fully wired ChatPipeline built from default configuration

Every pipeline fixture builds fresh state, so tests never share cooldowns
or command history.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from craft_companion.config import ServerConfig
from craft_companion.core.pipeline import ChatPipeline, build_pipeline
from craft_companion.knowledge.catalog import KnowledgeBase, default_knowledge_base
from tests.doubles import FakeClock, RecordingSession, ScriptedRenderer

# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture(scope="session")
def kb() -> KnowledgeBase:
    """The packaged knowledge base."""
    return default_knowledge_base()


@pytest.fixture
def session() -> RecordingSession:
    return RecordingSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cfg() -> ServerConfig:
    """Default configuration, independent of config files and environment."""
    return ServerConfig()


@pytest.fixture
def make_pipeline(
    cfg: ServerConfig, session: RecordingSession, clock: FakeClock
) -> Callable[..., ChatPipeline]:
    """
    Factory for pipelines wired to the recording session and fake clock.

    Usage:
        pipeline = make_pipeline(ScriptedRenderer("CHAT: hi"))
    """

    def _make(
        renderer: ScriptedRenderer | None = None,
        *,
        config: ServerConfig | None = None,
        game_session: RecordingSession | None = None,
        structures: list[str] | None = None,
    ) -> ChatPipeline:
        return build_pipeline(
            config or cfg,
            game_session or session,
            renderer=renderer or ScriptedRenderer(),
            clock=clock,
            structures=structures if structures is not None else ["bear_habitat", "lion_den"],
        )

    return _make
