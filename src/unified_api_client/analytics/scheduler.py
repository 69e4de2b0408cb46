"""
unified_api_client.analytics.scheduler

Timer seam for the analytics batcher and navigation recorder.

Responsibilities:
- `Scheduler` protocol: a clock plus `call_later`.
- `AsyncioScheduler`: the default, backed by the running event loop.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def now(self) -> float:
        """Seconds on a monotonic clock."""
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(max(delay, 0.0), callback)


# --- Module Notes -----------------------------------------------------------
# Tests substitute a manual scheduler whose clock only moves when told to.
