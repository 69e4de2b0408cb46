"""
unified_api_client.analytics.batcher

Debounced analytics delivery with a ceiling.

Responsibilities:
- Queue interaction events and coalesce bursts into one POST.
- Guarantee delivery within one window of the oldest queued event, however busy.
- Flush unconditionally when the page is hidden or the client closes.

State machine:
- `record`: enqueue (the first event of an empty queue starts the batch clock),
  cancel the pending timer, then either flush now (the batch is already a full
  window old) or re-arm the timer for the rest of the window.
- `flush`: drain the queue, clear the timer, send.
  Draining and clearing happen before the first await, so a concurrent `record` lands in
  the next batch rather than being lost or sent twice.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Awaitable, Callable
from typing import Any

from unified_api_client.analytics.events import InteractionEvent
from unified_api_client.analytics.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from unified_api_client.collaborators import ScreenProvider, no_screen
from unified_api_client.errors import ApiClientError
from unified_api_client.observability.logging import get_logger

log = get_logger(__name__)

Sender = Callable[[list[dict[str, Any]]], Awaitable[Any]]


class AnalyticsBatcher:
    def __init__(
        self,
        *,
        send: Sender,
        window_ms: int = 2000,
        scheduler: Scheduler | None = None,
        screen: ScreenProvider = no_screen,
    ) -> None:
        self._send = send
        self._window = window_ms / 1000
        self._scheduler = scheduler or AsyncioScheduler()
        self._screen = screen
        self._queue: list[InteractionEvent] = []
        self._timer: TimerHandle | None = None
        self._batch_started_at = self._scheduler.now()
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> tuple[InteractionEvent, ...]:
        return tuple(self._queue)

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    def record(self, event: InteractionEvent) -> None:
        if event.screen is None:
            event = dataclasses.replace(event, screen=self._screen())
        if not self._queue:
            self._batch_started_at = self._scheduler.now()
        self._queue.append(event)
        self._cancel_timer()

        elapsed = self._scheduler.now() - self._batch_started_at
        if elapsed > self._window:
            self._flush_soon()
        else:
            self._timer = self._scheduler.call_later(self._window - elapsed, self._on_timer)

    def visibility_changed(self, hidden: bool) -> None:
        if hidden:
            self._flush_soon()

    async def flush(self) -> None:
        await self._deliver(self._drain())

    async def wait_idle(self) -> None:
        """Wait for every flush already started by a timer or visibility change."""
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def aclose(self) -> None:
        await self.flush()
        await self.wait_idle()

    # -- private helpers -----------------------------------------------------

    def _on_timer(self) -> None:
        self._timer = None
        self._flush_soon()

    def _flush_soon(self) -> None:
        batch = self._drain()
        if not batch:
            return
        task = asyncio.ensure_future(self._deliver(batch))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    def _drain(self) -> list[InteractionEvent]:
        self._cancel_timer()
        batch, self._queue = self._queue, []
        return batch

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _deliver(self, batch: list[InteractionEvent]) -> None:
        if not batch:
            return
        try:
            await self._send([e.as_json() for e in batch])
        except ApiClientError as e:
            # Already surfaced by the executor; analytics never fails the caller.
            log.error("analytics_flush_failed", events=len(batch), error=e.message)
        else:
            log.debug("analytics_flushed", events=len(batch))


# --- Module Notes -----------------------------------------------------------
# The timer normally fires at the ceiling; the immediate branch only runs when the
# loop was too busy to fire it before the next event arrived.
