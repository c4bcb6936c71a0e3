"""Console backend for local development.

Type chat lines as ``username: message`` and the assistant answers on
stdout.  Commands are printed instead of executed, so the whole pipeline
can be exercised against a real model without a game server.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TextIO

from craft_companion.core.pipeline import ChatPipeline
from craft_companion.core.session import ChatMessage

logger = logging.getLogger(__name__)

QUIT_WORDS = ("quit", "exit")


class ConsoleSession:
    """``GameSession`` that prints chat lines and commands."""

    def __init__(self, bot_name: str, out: TextIO | None = None) -> None:
        self._bot_name = bot_name
        self._out = out or sys.stdout

    async def send_chat(self, text: str) -> None:
        print(f"<{self._bot_name}> {text}", file=self._out, flush=True)

    async def execute_command(self, command: str) -> None:
        print(f"[command] /{command}", file=self._out, flush=True)


def parse_console_line(line: str) -> ChatMessage | None:
    """Split ``username: message`` into a ``ChatMessage``.

    Returns ``None`` for blank lines or lines without a username.
    """
    username, sep, text = line.strip().partition(":")
    if not sep or not username.strip() or not text.strip():
        return None
    return ChatMessage(username=username.strip(), text=text.strip())


async def run_console(pipeline: ChatPipeline, stream: TextIO | None = None) -> int:
    """Feed console lines to the pipeline until EOF or ``quit``.

    Returns:
        Exit code (always 0).
    """
    source = stream or sys.stdin
    while True:
        line = await asyncio.to_thread(source.readline)
        if not line:
            break
        if line.strip().lower() in QUIT_WORDS:
            break
        message = parse_console_line(line)
        if message is None:
            print("Type lines as 'username: message'.", flush=True)
            continue
        await pipeline.handle(message)
    logger.info("Console session ended")
    return 0
