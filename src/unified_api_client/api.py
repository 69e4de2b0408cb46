"""
unified_api_client.api

Composition root: one `APIBase` per browser-tab-equivalent session.

Responsibilities:
- Wire Session, TokenStore, authorization cache, executor and analytics together.
- Expose the public surface host applications use (verbs, GraphQL, auth, analytics).
- Own the lifetime of the httpx client it creates.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx

from unified_api_client.analytics.batcher import AnalyticsBatcher
from unified_api_client.analytics.events import InteractionEvent
from unified_api_client.analytics.navigation import NavigationRecorder, NavigationTarget
from unified_api_client.analytics.scheduler import Scheduler
from unified_api_client.auth import unified
from unified_api_client.auth.authz_cache import ImpersonationAuthorizationCache
from unified_api_client.auth.models import ImpersonationStatus
from unified_api_client.auth.session import MemorySessionStorage, Session, SessionStorage
from unified_api_client.auth.token_store import TokenStore
from unified_api_client.client.executor import RequestExecutor
from unified_api_client.client.query import QueryPayload
from unified_api_client.client.upload_transport import ProgressCallback
from unified_api_client.collaborators import (
    LocationProvider,
    LoggingNotifier,
    Notifier,
    RecordingRedirector,
    Redirector,
    ScreenProvider,
    blank_location,
    no_screen,
)
from unified_api_client.errors import ApiClientError
from unified_api_client.observability.logging import configure_logging, get_logger
from unified_api_client.settings import Settings

log = get_logger(__name__)

LoginRedirect = Callable[["APIBase", str], str]


class APIBase:
    """
    Host applications usually subclass this and add typed methods for their API,
    calling `get`/`post`/`graphql` underneath.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient | None = None,
        storage: SessionStorage | None = None,
        notifier: Notifier | None = None,
        redirector: Redirector | None = None,
        location: LocationProvider = blank_location,
        screen: ScreenProvider = no_screen,
        login_redirect: LoginRedirect = unified.login_redirect,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.settings = settings
        self.auth_redirect = settings.auth_redirect
        self.login_redirect = login_redirect
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.redirector: Redirector = redirector or RecordingRedirector()
        self._owns_http = http is None

        self.session = Session(storage=storage or MemorySessionStorage())
        self.tokens = TokenStore(
            session=self.session,
            http=http or httpx.AsyncClient(),
            auth_redirect=settings.auth_redirect,
            redirector=self.redirector,
        )
        self.authz = ImpersonationAuthorizationCache(
            token=lambda: self.tokens.token,
            http=lambda: self.tokens.http,
            auth_redirect=settings.auth_redirect,
            ttl_seconds=settings.authz_cache_ttl_seconds,
        )
        self.executor = RequestExecutor(
            api_base=settings.api_base,
            tokens=self.tokens,
            notifier=self.notifier,
            redirector=self.redirector,
            location=location,
            login_redirect=lambda current_url: self.login_redirect(self, current_url),
            graphql_path=settings.graphql_path,
        )
        self.analytics = AnalyticsBatcher(
            send=self._send_analytics,
            window_ms=settings.analytics_window_ms,
            scheduler=scheduler,
            screen=screen,
        )
        self.navigation = NavigationRecorder(
            self.record_interaction,
            debounce_ms=settings.navigation_debounce_ms,
            scheduler=scheduler,
        )

    @property
    def token(self) -> str | None:
        return self.tokens.token

    async def init(self, token: str | None = None, http: httpx.AsyncClient | None = None) -> None:
        if http is not None and http is not self.tokens.http:
            if self._owns_http:
                await self.tokens.http.aclose()
            self._owns_http = False
        self.tokens.init(token, http)

    # -- requests ------------------------------------------------------------

    async def get(self, path: str, query: QueryPayload | None = None) -> Any:
        return await self.executor.get(path, query)

    async def post(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        return await self.executor.post(path, body, query)

    async def put(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        return await self.executor.put(path, body, query)

    async def patch(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        return await self.executor.patch(path, body, query)

    async def delete(self, path: str, query: QueryPayload | None = None, body: Any = None) -> Any:
        return await self.executor.delete(path, query, body)

    async def validated_post(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        return await self.executor.validated_post(path, body, query)

    async def validated_put(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        return await self.executor.validated_put(path, body, query)

    async def validated_patch(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        return await self.executor.validated_patch(path, body, query)

    async def graphql(self, query: str, variables: Any = None, query_signature: str | None = None) -> Any:
        return await self.executor.graphql(query, variables, query_signature)

    async def graphql_with_uploads(
        self,
        query: str,
        variables: Any = None,
        *,
        query_signature: str | None = None,
        omit_uploads: bool = False,
        on_progress: ProgressCallback | None = None,
        abort: asyncio.Event | None = None,
    ) -> Any:
        return await self.executor.graphql_with_uploads(
            query,
            variables,
            query_signature=query_signature,
            omit_uploads=omit_uploads,
            on_progress=on_progress,
            abort=abort,
        )

    # -- auth ----------------------------------------------------------------

    def logout(self) -> None:
        self.tokens.logout()

    async def impersonate(self, netid: str) -> None:
        try:
            await self.tokens.impersonate(netid)
        except ApiClientError as e:
            self.notifier(e.message)
            raise

    def exit_impersonation(self) -> None:
        try:
            self.tokens.exit_impersonation()
        except ApiClientError as e:
            self.notifier(e.message)
            raise

    def impersonation_status(self) -> ImpersonationStatus:
        return self.tokens.impersonation_status()

    async def may_impersonate(self, netid: str) -> bool:
        return await self.authz.may_impersonate(netid)

    async def may_impersonate_anyone(self) -> bool:
        return await self.authz.may_impersonate_anyone()

    # -- analytics -----------------------------------------------------------

    def record_interaction(self, event: InteractionEvent) -> None:
        self.analytics.record(event)

    def record_navigation(self, source: NavigationTarget | None, dest: NavigationTarget | None) -> None:
        self.navigation.after_navigate(source, dest)

    def visibility_changed(self, hidden: bool) -> None:
        self.analytics.visibility_changed(hidden)

    async def _send_analytics(self, events: list[dict[str, Any]]) -> Any:
        return await self.executor.request(
            self.settings.analytics_path, "POST", body=events, keepalive=True
        )

    # -- lifetime ------------------------------------------------------------

    async def aclose(self) -> None:
        await self.analytics.aclose()
        await self.executor.drain()
        if self._owns_http:
            await self.tokens.http.aclose()

    async def __aenter__(self) -> APIBase:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def create_api(*, settings: Settings, **kwargs: Any) -> APIBase:
    # Configure structured logging once, before the first request is made.
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json=settings.env != "dev",
    )
    api = APIBase(settings=settings, **kwargs)
    log.info("api_created", env=settings.env, api_base=settings.api_base)
    return api


# --- Module Notes -----------------------------------------------------------
# Subclasses should add domain methods here rather than reaching into `executor`.
