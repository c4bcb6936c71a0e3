"""Parse the AI reply into a chat line and an optional command.

The prompt asks for two tagged lines::

    CHAT: Here is your sword, Steve!
    COMMAND: /give Steve diamond_sword 1

Models do not always comply, so parsing is lenient:

- A line counts when its stripped form starts with ``CHAT:`` or
  ``COMMAND:``; the stripped remainder becomes the field value.
- A tag that appears more than once keeps its last value.
- A reply with no tagged line at all is treated as plain chat.

Parsing never fails.  Whatever comes back still has to pass the safety gates
before anything reaches the game.
"""

from __future__ import annotations

from dataclasses import dataclass

CHAT_TAG = "CHAT:"
COMMAND_TAG = "COMMAND:"


@dataclass(frozen=True, slots=True)
class ParsedResponse:
    """Chat text and command extracted from one AI reply (either may be empty)."""

    chat: str = ""
    command: str = ""


def parse_response(text: str) -> ParsedResponse:
    """Split an AI reply into chat and command.

    Args:
        text: Raw reply content from the renderer.

    Returns:
        ``ParsedResponse``; the command is ``""`` when none was given.
    """
    chat = ""
    command = ""
    tagged = False

    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith(CHAT_TAG):
            chat = stripped[len(CHAT_TAG) :].strip()
            tagged = True
        elif stripped.startswith(COMMAND_TAG):
            command = stripped[len(COMMAND_TAG) :].strip()
            tagged = True

    if not tagged:
        return ParsedResponse(chat=text.strip(), command="")
    return ParsedResponse(chat=chat, command=command)
