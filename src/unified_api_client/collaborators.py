"""
unified_api_client.collaborators

Host capabilities the client depends on but does not implement.

Responsibilities:
- `Redirector`: navigate the page (used on 401 and logout).
- `Notifier`: show a human-readable error (used on every classified failure).
- `LocationProvider` / `ScreenProvider`: read the current URL / route id.
- Log-backed defaults so the client runs headless (scripts, tests).
"""

from __future__ import annotations

from typing import Protocol

from unified_api_client.observability.logging import get_logger

log = get_logger(__name__)


class Redirector(Protocol):
    def __call__(self, location: str) -> None: ...


class Notifier(Protocol):
    def __call__(self, message: str) -> None: ...


class LocationProvider(Protocol):
    def __call__(self) -> str: ...


class ScreenProvider(Protocol):
    def __call__(self) -> str | None: ...


class LoggingNotifier:
    """Default notifier: there is no toast outside a browser, so log a warning."""

    def __call__(self, message: str) -> None:
        log.warning("notify", message=message)


class RecordingRedirector:
    """
    Default redirector for headless use: remembers every navigation instead of
    performing it.
    """

    def __init__(self) -> None:
        self.locations: list[str] = []

    def __call__(self, location: str) -> None:
        log.info("redirect", location=location.split("?", 1)[0])
        self.locations.append(location)

    @property
    def last(self) -> str | None:
        return self.locations[-1] if self.locations else None


def blank_location() -> str:
    return ""


def no_screen() -> str | None:
    return None


# --- Module Notes -----------------------------------------------------------
# The redirect log line drops the query string: logout URLs carry the token.
