"""
unified_api_client.analytics.navigation

Navigation recording for single-page routers.

Responsibilities:
- Turn the host router's after-navigate hook into `navigation` interaction events.
- Debounce double-fired hooks (redirects) and keep the first origin.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from unified_api_client.analytics.events import InteractionEvent
from unified_api_client.analytics.scheduler import AsyncioScheduler, Scheduler, TimerHandle

NAVIGATION_EVENT_TYPE = "navigation-recorder"


@dataclass(frozen=True, slots=True)
class NavigationTarget:
    route_id: str
    path: str


class NavigationRecorder:
    def __init__(
        self,
        record: Callable[[InteractionEvent], None],
        *,
        debounce_ms: int = 10,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._record = record
        self._debounce = debounce_ms / 1000
        self._scheduler = scheduler or AsyncioScheduler()
        self._timer: TimerHandle | None = None
        self._from: NavigationTarget | None = None

    def after_navigate(self, source: NavigationTarget | None, dest: NavigationTarget | None) -> None:
        """
        Call from the router's after-navigate hook. `source` is None on a full page load.
        """
        if self._timer is None:
            self._from = source
        else:
            self._timer.cancel()
        self._timer = self._scheduler.call_later(self._debounce, lambda: self._emit(dest))

    def _emit(self, dest: NavigationTarget | None) -> None:
        self._timer = None
        origin = self._from or dest
        self._record(
            InteractionEvent(
                event_type=NAVIGATION_EVENT_TYPE,
                screen=origin.route_id if origin else None,
                target=dest.path if dest else None,
                action="navigation",
                additional_properties={"fullPageLoad": "false" if self._from else "true"},
            )
        )
        self._from = None
