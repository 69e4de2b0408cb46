"""
tests.conftest

Shared fixtures.

Responsibilities:
- A scripted stand-in for the remote API (httpx MockTransport).
- A fake Unified Auth service (FastAPI, served in-process through httpx.ASGITransport).
- A manual scheduler so analytics timing is driven by the test, not the wall clock.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
import jwt
import pytest
from fastapi import Body, FastAPI, Header
from fastapi.responses import JSONResponse, PlainTextResponse

from unified_api_client.api import APIBase
from unified_api_client.collaborators import RecordingRedirector
from unified_api_client.settings import Settings

API = "http://api.test"
AUTH = "http://auth.test"
SIGNING_SECRET = "test-signing-secret-0123456789abcdef"


def make_token(sub: str, act: str | None = None) -> str:
    claims: dict[str, Any] = {"sub": sub}
    if act is not None:
        claims["act"] = {"sub": act}
    return jwt.encode(claims, SIGNING_SECRET, algorithm="HS256")


def bearer_subject(authorization: str) -> str | None:
    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        return None
    return jwt.decode(token, options={"verify_signature": False}).get("sub")


class ApiStub:
    """Routes (method, path) to response factories and records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Callable[[httpx.Request], Any]] = {}

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        *,
        json: Any = None,
        text: str | None = None,
    ) -> None:
        def respond(_: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=json)

        self._routes[(method, path)] = respond

    def on_call(self, method: str, path: str, handler: Callable[[httpx.Request], Any]) -> None:
        self._routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        handler = self._routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, text="no route")
        return handler(request)


@dataclass
class IdentityCalls:
    impersonate: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    may_impersonate: list[tuple[str, dict[str, Any]]] = field(default_factory=list)


def create_identity_app() -> FastAPI:
    app = FastAPI(title="fake unified auth")
    calls = IdentityCalls()
    app.state.calls = calls

    @app.post("/impersonate")
    async def impersonate(
        body: dict[str, Any] = Body(...), authorization: str = Header(default="")
    ):
        calls.impersonate.append((authorization, body))
        actor = bearer_subject(authorization)
        if actor is None:
            return PlainTextResponse("missing token", status_code=401)
        if body.get("netid") == "nobody":
            return PlainTextResponse("not permitted", status_code=403)
        return {"token": make_token(sub=body["netid"], act=actor)}

    @app.post("/mayImpersonate")
    async def may_impersonate(
        body: dict[str, Any] = Body(default={}), authorization: str = Header(default="")
    ):
        calls.may_impersonate.append((authorization, body))
        if body.get("netid") == "explode":
            return JSONResponse({"message": "boom"}, status_code=500)
        actor = bearer_subject(authorization) or ""
        authorized = actor.startswith("admin") and body.get("netid") != "root"
        return {"authorized": authorized}

    return app


class ManualTimer:
    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    def __init__(self) -> None:
        self.time = 0.0
        self.timers: list[ManualTimer] = []

    def now(self) -> float:
        return self.time

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.time + delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        target = self.time + seconds
        while True:
            due = [t for t in self.timers if not t.cancelled and t.deadline <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.deadline)
            self.timers.remove(timer)
            self.time = max(self.time, timer.deadline)
            timer.callback()
        self.time = target

    @property
    def armed(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", api_base=API, auth_redirect=f"{AUTH}/app/login")


@pytest.fixture
def stub() -> ApiStub:
    return ApiStub()


@pytest.fixture
def identity() -> FastAPI:
    return create_identity_app()


@pytest.fixture
def http(stub: ApiStub, identity: FastAPI) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        mounts={
            API: httpx.MockTransport(stub),
            AUTH: httpx.ASGITransport(app=identity),
        }
    )


@pytest.fixture
def notes() -> list[str]:
    return []


@pytest.fixture
def redirector() -> RecordingRedirector:
    return RecordingRedirector()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def api(
    settings: Settings,
    http: httpx.AsyncClient,
    notes: list[str],
    redirector: RecordingRedirector,
    scheduler: ManualScheduler,
) -> APIBase:
    return APIBase(
        settings=settings,
        http=http,
        notifier=notes.append,
        redirector=redirector,
        location=lambda: "http://app.test/current",
        screen=lambda: "/dashboard",
        scheduler=scheduler,
    )


# --- Module Notes -----------------------------------------------------------
# Fixtures are synchronous; tests call `await api.init(...)` themselves so the
# readiness gate is exercised explicitly.
