"""Per-user cooldown between accepted requests."""

from __future__ import annotations

import time
from collections.abc import Callable

from craft_companion.core.state import PipelineState

DEFAULT_COOLDOWN_MS = 500


class RateLimiter:
    """Fixed-window cooldown keyed by username.

    A user is on cooldown while less than ``window_ms`` has passed since
    their last accepted message.  The clock is injectable so tests can
    advance time without sleeping; it must be monotonic in seconds.
    """

    def __init__(
        self,
        state: PipelineState,
        *,
        window_ms: int = DEFAULT_COOLDOWN_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._state = state
        self._window = window_ms / 1000.0
        self._clock = clock

    def is_on_cooldown(self, username: str) -> bool:
        last = self._state.cooldowns.get(username)
        if last is None:
            return False
        return self._clock() - last < self._window

    def record_usage(self, username: str) -> None:
        self._state.cooldowns[username] = self._clock()
