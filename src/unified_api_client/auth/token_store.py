"""
unified_api_client.auth.token_store

Token lifecycle: init, logout, impersonate, exit impersonation.

Responsibilities:
- Own every write to the Session (the only writer of `original_token`).
- Talk to Unified Auth for delegated (impersonation) tokens.
- Open the readiness latch once the initial token is known.
"""

from __future__ import annotations

import httpx

from unified_api_client.auth.jwt import impersonation_status
from unified_api_client.auth.models import Impersonating, ImpersonationStatus
from unified_api_client.auth.readiness import ReadyLatch
from unified_api_client.auth.session import Session
from unified_api_client.auth.unified import identity_endpoint, logout_url
from unified_api_client.collaborators import Redirector
from unified_api_client.errors import (
    NotImpersonatingError,
    PreconditionError,
    RemoteRejectionError,
    TransportError,
)
from unified_api_client.observability.logging import get_logger

log = get_logger(__name__)


class TokenStore:
    def __init__(
        self,
        *,
        session: Session,
        http: httpx.AsyncClient,
        auth_redirect: str,
        redirector: Redirector,
        latch: ReadyLatch | None = None,
    ) -> None:
        self._session = session
        self._http = http
        self._auth_redirect = auth_redirect
        self._redirect = redirector
        self.latch = latch or ReadyLatch()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http

    @property
    def token(self) -> str | None:
        return self._session.current_token

    @property
    def original_token(self) -> str | None:
        return self._session.original_token

    def init(self, token: str | None = None, http: httpx.AsyncClient | None = None) -> None:
        if http is not None:
            self._http = http
        if token:
            self._session.set_token(token)
        self._session.load()
        # A persisted original token only belongs to a delegated current token; a
        # fresh login after an expired impersonation must not inherit it.
        if isinstance(impersonation_status(self._session.current_token), Impersonating):
            self._session.restore_original_token()
        else:
            self._session.clear_original_token()
        self.latch.open()
        log.info("session_initialized", authenticated=self._session.is_authenticated)

    async def ready(self) -> None:
        await self.latch.wait()

    def logout(self) -> None:
        if not self._session.current_token:
            return
        # A delegated token must not be used to end the real user's session.
        token = self._session.original_token or self._session.current_token
        location = logout_url(self._auth_redirect, token)
        self._session.clear()
        log.info("logout")
        self._redirect(location)

    async def impersonate(self, netid: str) -> None:
        """
        Replace the current token with a delegated token for `netid`.

        The delegated token expires after about an hour and is not renewed here.
        Impersonating again while impersonating keeps the root user's token as
        the original and authenticates the request with it.
        """

        current = self._session.current_token
        if not current:
            raise PreconditionError("Must be authenticated to impersonate.")
        root = self._session.original_token or current

        try:
            resp = await self._http.post(
                identity_endpoint(self._auth_redirect, "/impersonate"),
                headers={"Authorization": f"Bearer {root}", "Content-Type": "application/json"},
                json={"netid": netid},
            )
        except httpx.RequestError as e:
            raise TransportError(f"Failed to impersonate: {e}") from e

        if not resp.is_success:
            raise RemoteRejectionError(
                status=resp.status_code,
                message=f"Failed to impersonate: {resp.text}",
                body=resp.text,
            )

        try:
            delegated = resp.json()["token"]
        except (ValueError, KeyError, TypeError) as e:
            raise TransportError("Failed to impersonate: malformed response") from e

        if self._session.original_token is None:
            self._session.set_original_token(current)
        self._session.set_token(delegated)
        log.info("impersonation_started", netid=netid)

    def exit_impersonation(self) -> None:
        original = self._session.original_token
        if not original:
            raise NotImpersonatingError()
        self._session.set_token(original)
        self._session.clear_original_token()
        log.info("impersonation_ended")

    def impersonation_status(self) -> ImpersonationStatus:
        return impersonation_status(self._session.current_token)


# --- Module Notes -----------------------------------------------------------
# `original_token` is written only after Unified Auth hands back a token, so a
# rejected impersonation leaves the session exactly as it was.
