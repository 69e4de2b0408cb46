"""
unified_api_client.auth.authz_cache

Memoized "may impersonate" checks against Unified Auth.

Responsibilities:
- Answer "may this token impersonate anyone" and "may it impersonate <netid>".
- Coalesce concurrent checks for the same key into one request.
- Fail closed: any error or non-2xx answer is `False`, never an exception.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from unified_api_client.auth.unified import identity_endpoint
from unified_api_client.observability.logging import get_logger

log = get_logger(__name__)

_ANYONE = ""


@dataclass(slots=True)
class _Entry:
    task: asyncio.Task[bool]
    created_at: float


class ImpersonationAuthorizationCache:
    def __init__(
        self,
        *,
        token: Callable[[], str | None],
        http: Callable[[], httpx.AsyncClient],
        auth_redirect: str,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._token = token
        self._http = http
        self._auth_redirect = auth_redirect
        self._ttl = ttl_seconds
        self._clock = clock
        self._anyone: dict[str, _Entry] = {}
        self._targets: dict[tuple[str, str], _Entry] = {}

    async def may_impersonate_anyone(self) -> bool:
        token = self._token()
        if not token:
            return False
        return await self._lookup(self._anyone, token, token, _ANYONE)

    async def may_impersonate(self, netid: str) -> bool:
        token = self._token()
        if not token:
            return False
        return await self._lookup(self._targets, (token, netid), token, netid)

    async def _lookup(
        self, table: dict[Any, _Entry], key: str | tuple[str, str], token: str, netid: str
    ) -> bool:
        entry = table.get(key)
        if entry is None or self._expired(entry):
            entry = _Entry(
                task=asyncio.ensure_future(self._check(token, netid)),
                created_at=self._clock(),
            )
            table[key] = entry
        # Shielded so one caller giving up does not cancel the check for the others.
        return await asyncio.shield(entry.task)

    def _expired(self, entry: _Entry) -> bool:
        if self._ttl is None or not entry.task.done():
            return False
        return self._clock() - entry.created_at >= self._ttl

    async def _check(self, token: str, netid: str) -> bool:
        body = {"netid": netid} if netid else {}
        try:
            resp = await self._http().post(
                identity_endpoint(self._auth_redirect, "/mayImpersonate"),
                headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
                json=body,
            )
            if not resp.is_success:
                log.info("may_impersonate_rejected", status=resp.status_code, netid=netid or None)
                return False
            return resp.json().get("authorized") is True
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            log.warning("may_impersonate_failed", error=str(e), netid=netid or None)
            return False

    def clear(self) -> None:
        self._anyone.clear()
        self._targets.clear()


# --- Module Notes -----------------------------------------------------------
# Answers are kept for the life of the client unless `ttl_seconds` is set; a TTL is
# only needed when revocations must be noticed within one long-lived session.
