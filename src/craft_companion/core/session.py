"""Game-session contract shared by every transport.

The chat pipeline never talks to a game client directly.  It receives
``ChatMessage`` objects from a transport and answers through a
``GameSession``, which only needs two coroutines: say something in chat, and
run a command.  The console backend and the HTTP bridge each provide one.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import NamedTuple, Protocol, runtime_checkable


class Position(NamedTuple):
    """Player position in world coordinates."""

    x: float
    y: float
    z: float


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """One chat line received from the game.

    Attributes:
        username:    Sender name exactly as the game reports it.
        text:        Raw message text.
        received_at: Wall-clock receive time (seconds since the epoch).
        position:    Sender position when the transport knows it.
    """

    username: str
    text: str
    received_at: float = field(default_factory=time.time)
    position: Position | None = None


@runtime_checkable
class GameSession(Protocol):
    """Outgoing side of a connection to the game."""

    async def send_chat(self, text: str) -> None:
        """Say ``text`` in game chat."""
        ...

    async def execute_command(self, command: str) -> None:
        """Run ``command`` (without a leading slash) in the game."""
        ...
