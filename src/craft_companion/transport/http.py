"""
HTTP bridge between a game-side plugin and the chat pipeline.

The plugin forwards every chat line with ``POST /chat`` and polls
``GET /outbox`` for the chat lines and commands the assistant produced.
Nothing is pushed to the game; the outbox is the only outgoing channel.

Endpoints:
    POST /chat     hand one chat event to the pipeline
    GET  /outbox   drain queued chat lines and commands
    GET  /history  recent dispatched commands
    GET  /health   liveness, version and model
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Literal

from fastapi import APIRouter, FastAPI

from craft_companion import __version__
from craft_companion.core.pipeline import ChatPipeline
from craft_companion.core.session import ChatMessage, Position
from craft_companion.transport.models import (
    ChatEventRequest,
    ChatEventResponse,
    CommandRecordModel,
    HealthResponse,
    HistoryResponse,
    OutboxEntryModel,
    OutboxResponse,
)

logger = logging.getLogger(__name__)

# Entries kept while the plugin is not polling.
OUTBOX_LIMIT = 500


@dataclass(frozen=True, slots=True)
class OutboxEntry:
    kind: Literal["chat", "command"]
    text: str


class OutboxSession:
    """``GameSession`` that queues everything for the plugin to collect.

    The queue holds at most ``limit`` entries.  When the plugin stops
    polling, the oldest entries are dropped and a warning is logged.
    """

    def __init__(self, limit: int = OUTBOX_LIMIT) -> None:
        self._queue: deque[OutboxEntry] = deque(maxlen=limit)
        self.dropped = 0

    def _put(self, entry: OutboxEntry) -> None:
        if len(self._queue) == self._queue.maxlen:
            self.dropped += 1
            logger.warning(
                "Outbox full (%d entries), dropping oldest; is the plugin polling /outbox?",
                self._queue.maxlen,
            )
        self._queue.append(entry)

    async def send_chat(self, text: str) -> None:
        self._put(OutboxEntry("chat", text))

    async def execute_command(self, command: str) -> None:
        self._put(OutboxEntry("command", command))

    def __len__(self) -> int:
        return len(self._queue)

    def drain(self) -> list[OutboxEntry]:
        """Return and remove every queued entry, oldest first."""
        entries = list(self._queue)
        self._queue.clear()
        return entries


def router(pipeline: ChatPipeline, outbox: OutboxSession, *, model: str = "") -> APIRouter:
    """Build the bridge routes around one pipeline and its outbox."""
    api = APIRouter()

    @api.post("/chat", response_model=ChatEventResponse)
    async def chat(request: ChatEventRequest):
        """Hand one chat event to the pipeline."""
        position = None
        if request.position is not None:
            position = Position(request.position.x, request.position.y, request.position.z)
        message = ChatMessage(username=request.username, text=request.text, position=position)

        addressed = pipeline.is_addressed(message)
        if addressed:
            await pipeline.handle(message)
        return ChatEventResponse(addressed=addressed, queued=len(outbox))

    @api.get("/outbox", response_model=OutboxResponse)
    async def drain_outbox():
        """Drain queued chat lines and commands."""
        entries = outbox.drain()
        if entries:
            logger.debug("Delivering %d outbox entries", len(entries))
        return OutboxResponse(
            entries=[OutboxEntryModel(kind=entry.kind, text=entry.text) for entry in entries]
        )

    @api.get("/history", response_model=HistoryResponse)
    async def history():
        """Recent dispatched commands."""
        return HistoryResponse(
            commands=[
                CommandRecordModel(
                    command=record.command,
                    timestamp=record.timestamp,
                    is_admin=record.is_admin,
                )
                for record in pipeline.state.history
            ]
        )

    @api.get("/health", response_model=HealthResponse)
    async def health():
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            version=__version__,
            model=model,
            structures=len(pipeline.structures),
        )

    return api


def create_app(pipeline: ChatPipeline, outbox: OutboxSession, *, model: str = "") -> FastAPI:
    """Create the FastAPI application for the bridge.

    Args:
        pipeline: Pipeline whose session is ``outbox``.
        outbox:   Queue the plugin polls.
        model:    AI model name reported by ``/health``.
    """
    app = FastAPI(title="Craft Companion Bridge", version=__version__)
    app.include_router(router(pipeline, outbox, model=model))
    return app
