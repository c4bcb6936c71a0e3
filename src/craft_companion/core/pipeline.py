"""The chat pipeline: one message in, chat lines and commands out.

``ChatPipeline.handle`` is the single entry point every transport calls.  It
owns no I/O of its own; everything outgoing goes through the ``GameSession``
it was built with, and the AI call goes through the renderer.

Per-message flow
----------------
1. Ignore the bot's own messages and anything not addressed to it (the
   trigger, default ``@admin``, or the bot name).  Strip the trigger.
2. Cooldown check; a user on cooldown gets a "please wait" line.
3. Record usage, resolve admin status, greet.
4. Classify the intent and run the pre-request gate.
5. Analyze the message; for builds, match an available structure.
6. Compose the prompt and ask the AI.
7. AI failure → intent fallback line plus a default command where one
   exists.  Default commands skip the post-response gate.
8. Parse the reply, send the chat line, run the post-response gate.
9. Dispatch: sanitize, build-size guard, execute, record.

Steps 4-9 run inside one ``try``: an unexpected error is logged and the
child gets a friendly failure line.  Each call to ``handle`` is independent,
so one player's failure never affects another's.

Concurrency
-----------
Handlers run on one event loop and interleave while awaiting the AI or the
session.  The only shared state is ``PipelineState``.  Two messages from the
same player are not serialized; the cooldown is the only ordering guard.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable, Iterable
from typing import Protocol

from craft_companion.config import ServerConfig, validate_config
from craft_companion.core import fallbacks
from craft_companion.core.rate_limiter import RateLimiter
from craft_companion.core.session import ChatMessage, GameSession
from craft_companion.core.state import PipelineState
from craft_companion.errors import ConfigurationError
from craft_companion.interpret.analyzer import RequestAnalyzer
from craft_companion.interpret.intent import Intent, categorize
from craft_companion.interpret.parser import parse_response
from craft_companion.interpret.prompt import PromptComposer
from craft_companion.interpret.renderer import OllamaRenderer
from craft_companion.interpret.structures import StructureMatcher, discover_structures
from craft_companion.knowledge.catalog import KnowledgeBase, default_knowledge_base
from craft_companion.safety.sanitizer import AdminPolicy, CommandSanitizer
from craft_companion.safety.validator import SafetyValidator

logger = logging.getLogger(__name__)

# Characters of the prompt logged in debug mode.
_PROMPT_PREVIEW_CHARS = 200


class Renderer(Protocol):
    """Anything that turns a prompt into raw AI text (``None`` on failure)."""

    def render(self, prompt: str) -> Awaitable[str | None]: ...


class ChatPipeline:
    """Classification, AI round-trip and safety gates for chat messages.

    Attributes:
        session:    Where chat lines and commands are sent.
        state:      Cooldowns and command history for this pipeline.
        structures: Structure names available for build requests.
    """

    def __init__(
        self,
        *,
        session: GameSession,
        renderer: Renderer,
        bot_name: str,
        trigger: str = "@admin",
        knowledge: KnowledgeBase | None = None,
        safety: SafetyValidator | None = None,
        sanitizer: CommandSanitizer,
        admin_policy: AdminPolicy | None = None,
        rate_limiter: RateLimiter | None = None,
        state: PipelineState | None = None,
        structures: Iterable[str] = (),
        debug: bool = False,
    ) -> None:
        kb = knowledge or default_knowledge_base()
        self.session = session
        self.state = state or PipelineState()
        self.structures: list[str] = list(structures)
        self._renderer = renderer
        self._bot_name = bot_name
        self._trigger = trigger
        self._trigger_pattern = re.compile(re.escape(trigger), re.IGNORECASE)
        self._safety = safety or SafetyValidator(kb)
        self._sanitizer = sanitizer
        self._admins = admin_policy or AdminPolicy()
        self._limiter = rate_limiter or RateLimiter(self.state)
        self._analyzer = RequestAnalyzer(kb)
        self._composer = PromptComposer(kb)
        self._matcher = StructureMatcher(kb)
        self._debug = debug

    @property
    def bot_name(self) -> str:
        return self._bot_name

    def is_addressed(self, message: ChatMessage) -> bool:
        """Return True if the message is from a player and meant for the bot."""
        if message.username == self._bot_name:
            return False
        lowered = message.text.lower()
        return self._trigger.lower() in lowered or self._bot_name.lower() in lowered

    def clean_text(self, text: str) -> str:
        """Remove the trigger from the message text."""
        return self._trigger_pattern.sub("", text).strip()

    async def handle(self, message: ChatMessage) -> None:
        """Process one chat message end to end."""
        if not self.is_addressed(message):
            return

        username = message.username
        text = self.clean_text(message.text)
        logger.info("Message from %s: %s", username, text)

        if self._limiter.is_on_cooldown(username):
            logger.debug("%s is on cooldown", username)
            await self._say(fallbacks.COOLDOWN.format(username=username))
            return

        self._limiter.record_usage(username)
        is_admin = self._admins.is_admin(username)
        await self._say(fallbacks.GREETING.format(username=username))

        try:
            await self._respond(message, username, text, is_admin)
        except Exception:
            logger.error("Error handling message from %s", username, exc_info=True)
            await self._say(fallbacks.GENERIC_FAILURE.format(username=username))

    async def _respond(
        self, message: ChatMessage, username: str, text: str, is_admin: bool
    ) -> None:
        intent = categorize(text)
        logger.debug("Intent for %s: %s", username, intent)

        validation = self._safety.validate_request(text)
        if not validation.is_valid:
            logger.info("Refused request from %s: %s", username, "; ".join(validation.issues))
            await self._say(fallbacks.REQUEST_REFUSED.format(username=username))
            return

        analysis = self._analyzer.analyze(text, intent)
        matched = None
        if intent == "build" and self.structures:
            matched = self._matcher.match(text, self.structures)
            logger.debug("Structure match for %s: %s", username, matched)

        prompt = self._composer.compose(
            analysis,
            username,
            text,
            player_position=message.position,
            matched_structure=matched,
        )
        if self._debug:
            logger.info("Prompt for %s: %s...", username, prompt[:_PROMPT_PREVIEW_CHARS])

        reply = await self._ask(prompt)
        if reply is None:
            await self._fall_back(message, username, text, intent, matched, is_admin)
            return

        parsed = parse_response(reply)
        if parsed.chat:
            await self._say(parsed.chat)
        if not parsed.command:
            return

        if not self._safety.is_command_safe(parsed.command):
            logger.warning("Unsafe AI command for %s: %s", username, parsed.command)
            await self._say(fallbacks.UNSAFE_COMMAND.format(username=username))
            return
        await self.dispatch(parsed.command, username, is_admin)

    async def _ask(self, prompt: str) -> str | None:
        try:
            return await self._renderer.render(prompt)
        except Exception:
            logger.warning("AI renderer raised; using fallback reply", exc_info=True)
            return None

    async def _fall_back(
        self,
        message: ChatMessage,
        username: str,
        text: str,
        intent: Intent,
        matched: str | None,
        is_admin: bool,
    ) -> None:
        logger.info("AI unavailable for %s; falling back for intent %s", username, intent)
        await self._say(fallbacks.fallback_chat(intent, username))
        command = fallbacks.default_command(
            intent,
            username=username,
            bot_name=self._bot_name,
            message=text,
            position=message.position,
            structure=matched,
        )
        if command:
            await self.dispatch(command, username, is_admin)

    async def dispatch(self, command: str, username: str, is_admin: bool) -> bool:
        """Sanitize, size-check and execute one command.

        Returns:
            True if the command reached the game session.
        """
        cleaned = self._sanitizer.sanitize(command, is_admin)
        if cleaned is None:
            await self._say(fallbacks.DISPATCH_REFUSED)
            return False

        if not self._safety.validate_build_size([cleaned]):
            await self._say(fallbacks.BUILD_TOO_LARGE.format(username=username))
            return False

        try:
            await self.session.execute_command(cleaned)
        except Exception:
            logger.warning("Command failed for %s: %s", username, cleaned, exc_info=True)
            await self._say(fallbacks.DISPATCH_FAILED.format(username=username))
            return False

        self.state.record_command(cleaned, is_admin)
        logger.info("Executed for %s: %s", username, cleaned)
        return True

    async def _say(self, text: str) -> None:
        try:
            await self.session.send_chat(text)
        except Exception:
            logger.warning("Could not send chat line: %s", text, exc_info=True)


def build_pipeline(
    cfg: ServerConfig,
    session: GameSession,
    *,
    renderer: Renderer | None = None,
    knowledge: KnowledgeBase | None = None,
    clock: Callable[[], float] | None = None,
    structures: Iterable[str] | None = None,
) -> ChatPipeline:
    """Wire a ``ChatPipeline`` from configuration.

    Args:
        cfg:        Loaded configuration.
        session:    Transport-specific game session.
        renderer:   AI renderer; defaults to ``OllamaRenderer`` from ``cfg.ai``.
        knowledge:  Knowledge base; defaults to the packaged one.
        clock:      Monotonic clock for the rate limiter (tests).
        structures: Available structures; defaults to discovery on disk.

    Raises:
        ConfigurationError: If ``validate_config`` reports any problem.
    """
    problems = validate_config(cfg)
    if problems:
        raise ConfigurationError(problems)

    kb = knowledge or default_knowledge_base()
    state = PipelineState()
    limiter_kwargs = {"window_ms": cfg.bot.command_cooldown_ms}
    if clock is not None:
        limiter_kwargs["clock"] = clock

    if renderer is None:
        renderer = OllamaRenderer(
            api_endpoint=cfg.ai.api_endpoint,
            model=cfg.ai.model,
            timeout_seconds=cfg.ai.timeout_seconds,
            temperature=cfg.ai.temperature,
        )
    if structures is None:
        structures = discover_structures(cfg.structures.absolute_path, cfg.structures.extension)

    return ChatPipeline(
        session=session,
        renderer=renderer,
        bot_name=cfg.game.bot_name,
        trigger=cfg.game.trigger,
        knowledge=kb,
        safety=SafetyValidator(kb, max_extent=cfg.build.max_extent),
        sanitizer=CommandSanitizer(
            always_blocked=cfg.commands.blocked, admin_only=cfg.commands.admin
        ),
        admin_policy=AdminPolicy(cfg.bot.admin_users),
        rate_limiter=RateLimiter(state, **limiter_kwargs),
        state=state,
        structures=structures,
        debug=cfg.bot.debug_mode,
    )
