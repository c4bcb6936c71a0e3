"""Mutable state owned by one chat pipeline.

Everything the pipeline remembers between messages lives here: the last
accepted request time per user, and a bounded log of dispatched commands.
One ``PipelineState`` belongs to one pipeline; tests create their own or
call ``reset()``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

# Once the log grows past HISTORY_LIMIT it is cut back to the newest
# HISTORY_KEEP records.
HISTORY_LIMIT = 100
HISTORY_KEEP = 50


@dataclass(frozen=True, slots=True)
class CommandRecord:
    """A command that was sent to the game.

    Attributes:
        command:   Command text as dispatched.
        timestamp: Wall-clock dispatch time (seconds since the epoch).
        is_admin:  Whether the requester counted as an admin.
    """

    command: str
    timestamp: float
    is_admin: bool


@dataclass
class PipelineState:
    """Cooldown map and command history.

    Attributes:
        cooldowns: Username → clock reading of the last accepted message.
                   Keys are case-sensitive; entries are overwritten, never
                   removed.
        history:   Dispatched commands, oldest first.
    """

    cooldowns: dict[str, float] = field(default_factory=dict)
    history: list[CommandRecord] = field(default_factory=list)

    def record_command(
        self, command: str, is_admin: bool, timestamp: float | None = None
    ) -> CommandRecord:
        """Append a dispatched command and trim the log if it is too long."""
        record = CommandRecord(
            command=command,
            timestamp=time.time() if timestamp is None else timestamp,
            is_admin=is_admin,
        )
        self.history.append(record)
        if len(self.history) > HISTORY_LIMIT:
            del self.history[:-HISTORY_KEEP]
        return record

    def reset(self) -> None:
        """Forget every cooldown and every recorded command."""
        self.cooldowns.clear()
        self.history.clear()
