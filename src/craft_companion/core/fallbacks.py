"""Replies used when the AI collaborator is unavailable.

When the renderer fails the pipeline still answers the child: a friendly
chat line for the intent, and for intents that map cleanly onto a single
command, a deterministic default command built from keywords in the message.
Default commands are not AI output, but they still pass the dispatch-time
sanitizer and build-size guard.

Also holds every canned chat line the pipeline sends, so the wording lives in
one place.
"""

from __future__ import annotations

import math

from craft_companion.core.session import Position
from craft_companion.interpret.intent import Intent

GREETING = "👋 Hi {username}! Let me help you with that! 🌟"
COOLDOWN = "⏰ Hey {username}! Please wait a moment before asking again! ✨"
REQUEST_REFUSED = (
    "🚫 Oops {username}! That's not something I can help with. "
    "Let's try something fun instead! 🎮"
)
UNSAFE_COMMAND = "🛡️ That command isn't safe for kids, {username}! Let's try something else fun! ✨"
DISPATCH_REFUSED = "🛡️ That doesn't look safe! Let's stick to fun Minecraft commands! ✨"
BUILD_TOO_LARGE = "🏗️ Whoa, that's a huge build, {username}! Let's try something a bit smaller! ✨"
DISPATCH_FAILED = (
    "🔧 Something went wrong with that command, {username}! Let's try something else! ✨"
)
GENERIC_FAILURE = (
    "🤖 Oops! Something went wrong, {username}! Let me try to help you another way! 🔧"
)

_FALLBACK_CHAT: dict[str, str] = {
    "give": "🎁 Oops! Let me get you something awesome instead! ✨",
    "build": "🏗️ Let me build you something super cool! 🌟",
    "teleport": "✨ Zooming you around, {username}! 🚀",
    "gamemode": "🎮 Switching things up for you, {username}! ✨",
    "time": "🌞 Changing the time for you, {username}! ✨",
    "weather": "🌦️ Changing the weather for you, {username}! ✨",
    "help": (
        "🌟 I can give you items, build cool things, teleport you, "
        "and change the time or weather, {username}! Just ask! ✨"
    ),
}

DEFAULT_STRUCTURE = "house"
DEFAULT_GIVE_ITEM = "diamond"
SPAWN_POINT = (0, 70, 0)

# Structures are placed this many blocks away on x and z.
_BUILD_OFFSET = 5

# Keyword tables for the commands that need no AI at all; first match wins.
_GAMEMODE_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("creative", "creative"),
    ("adventure", "adventure"),
    ("spectator", "spectator"),
)
_TIME_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("midnight",), "midnight"),
    (("night", "dark"), "night"),
    (("noon",), "noon"),
    (("sunrise", "dawn"), "sunrise"),
    (("sunset", "dusk"), "sunset"),
)
_WEATHER_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("thunder",), "thunder"),
    (("rain", "storm"), "rain"),
)


def fallback_chat(intent: Intent, username: str) -> str:
    """Return the chat line sent when the AI could not answer."""
    return _FALLBACK_CHAT.get(intent, GENERIC_FAILURE).format(username=username)


def _build_target(position: Position | None) -> str:
    if position is None:
        return f"~{_BUILD_OFFSET} ~ ~{_BUILD_OFFSET}"
    x = math.floor(position.x + _BUILD_OFFSET)
    y = math.floor(position.y)
    z = math.floor(position.z + _BUILD_OFFSET)
    return f"{x} {y} {z}"


def default_command(
    intent: Intent,
    *,
    username: str,
    bot_name: str,
    message: str,
    position: Position | None = None,
    structure: str | None = None,
) -> str | None:
    """Build the deterministic command for an intent, if it has one.

    Args:
        intent:    Classified intent of the message.
        username:  Requesting player.
        bot_name:  The assistant's own in-game name.
        message:   Message text, used for keyword choices.
        position:  Requesting player's position, if known.
        structure: Structure matched for a build request, if any.

    Returns:
        Command text without a leading slash, or ``None`` for intents that
        have no safe default (help, generic).
    """
    lowered = message.lower()

    if intent == "give":
        return f"give {username} {DEFAULT_GIVE_ITEM} 1"

    if intent == "teleport":
        if "spawn" in lowered:
            x, y, z = SPAWN_POINT
            return f"tp {username} {x} {y} {z}"
        return f"tp {bot_name} {username}"

    if intent == "build":
        return f"structure load {structure or DEFAULT_STRUCTURE} {_build_target(position)}"

    if intent == "gamemode":
        mode = next((m for keyword, m in _GAMEMODE_KEYWORDS if keyword in lowered), "survival")
        return f"gamemode {mode} {username}"

    if intent == "time":
        setting = next(
            (value for words, value in _TIME_KEYWORDS if any(w in lowered for w in words)), "day"
        )
        return f"time set {setting}"

    if intent == "weather":
        weather = next(
            (value for words, value in _WEATHER_KEYWORDS if any(w in lowered for w in words)),
            "clear",
        )
        return f"weather {weather}"

    return None
