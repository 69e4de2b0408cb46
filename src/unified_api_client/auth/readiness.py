"""
unified_api_client.auth.readiness

One-shot readiness gate between `init()` and the first request.

Responsibilities:
- Two explicit states (PENDING, READY); READY is terminal.
- Let any number of coroutines wait for READY without blocking each other.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum


class LatchState(StrEnum):
    pending = "PENDING"
    ready = "READY"


class ReadyLatch:
    def __init__(self) -> None:
        self._state = LatchState.pending
        self._event: asyncio.Event | None = None

    @property
    def state(self) -> LatchState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is LatchState.ready

    def open(self) -> None:
        """Move to READY. Calling it again is a no-op."""
        if self._state is LatchState.ready:
            return
        self._state = LatchState.ready
        if self._event is not None:
            self._event.set()

    async def wait(self) -> None:
        if self._state is LatchState.ready:
            return
        # Created lazily so the latch can be built outside a running loop.
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()


# --- Module Notes -----------------------------------------------------------
# There is no reset: a client is initialized once per session lifetime.
