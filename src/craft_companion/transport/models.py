"""
Pydantic models for the HTTP bridge.

The game-side plugin POSTs chat events and polls the outbox for what the
assistant wants to say or run.  Request models describe what the plugin
sends; response models describe what it gets back.
"""

from typing import Literal

from pydantic import BaseModel, Field

# ============================================================================
# REQUEST MODELS (Game plugin → Assistant)
# ============================================================================


class PositionModel(BaseModel):
    """Player position in world coordinates."""

    x: float
    y: float
    z: float


class ChatEventRequest(BaseModel):
    """
    One chat line seen in the game.

    Attributes:
        username: Sender name exactly as the game reports it
        text: Raw chat text, including the trigger
        position: Sender position when the plugin can read it
    """

    username: str = Field(min_length=1)
    text: str
    position: PositionModel | None = None


# ============================================================================
# RESPONSE MODELS (Assistant → Game plugin)
# ============================================================================


class ChatEventResponse(BaseModel):
    """
    Result of handing a chat event to the pipeline.

    Attributes:
        addressed: False when the message was not meant for the assistant
        queued: Number of outbox entries waiting after processing
    """

    addressed: bool
    queued: int


class OutboxEntryModel(BaseModel):
    """A chat line to say or a command to run (no leading slash)."""

    kind: Literal["chat", "command"]
    text: str


class OutboxResponse(BaseModel):
    """Everything queued since the last poll, oldest first."""

    entries: list[OutboxEntryModel]


class CommandRecordModel(BaseModel):
    """One dispatched command from the history log."""

    command: str
    timestamp: float
    is_admin: bool


class HistoryResponse(BaseModel):
    """Recent dispatched commands, oldest first."""

    commands: list[CommandRecordModel]


class HealthResponse(BaseModel):
    """Liveness information."""

    status: str
    version: str
    model: str
    structures: int
