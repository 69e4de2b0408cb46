"""
tests.test_authz_cache

"May impersonate" checks: coalescing, caching, fail-closed behavior.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
from fastapi import FastAPI

from conftest import AUTH, make_token
from unified_api_client.api import APIBase
from unified_api_client.auth.authz_cache import ImpersonationAuthorizationCache


@pytest.mark.asyncio
async def test_concurrent_checks_share_one_request(api: APIBase, identity: FastAPI) -> None:
    await api.init(make_token("admin1"))

    results = await asyncio.gather(api.may_impersonate("user1"), api.may_impersonate("user1"))

    assert results == [True, True]
    assert len(identity.state.calls.may_impersonate) == 1

    assert await api.may_impersonate("user1") is True
    assert len(identity.state.calls.may_impersonate) == 1


@pytest.mark.asyncio
async def test_anyone_and_target_caches_are_independent(api: APIBase, identity: FastAPI) -> None:
    await api.init(make_token("admin1"))

    assert await api.may_impersonate_anyone() is True
    assert await api.may_impersonate("root") is False
    assert [body for _, body in identity.state.calls.may_impersonate] == [{}, {"netid": "root"}]


@pytest.mark.asyncio
async def test_non_admin_is_refused(api: APIBase) -> None:
    await api.init(make_token("user1"))
    assert await api.may_impersonate_anyone() is False


@pytest.mark.asyncio
async def test_no_token_short_circuits(api: APIBase, identity: FastAPI) -> None:
    await api.init()
    assert await api.may_impersonate("user1") is False
    assert await api.may_impersonate_anyone() is False
    assert identity.state.calls.may_impersonate == []


@pytest.mark.asyncio
async def test_server_error_fails_closed(api: APIBase, notes: list[str]) -> None:
    await api.init(make_token("admin1"))
    assert await api.may_impersonate("explode") is False
    assert notes == []


@pytest.mark.asyncio
async def test_network_error_fails_closed() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    cache = ImpersonationAuthorizationCache(
        token=lambda: make_token("admin1"), http=lambda: http, auth_redirect=f"{AUTH}/login"
    )
    assert await cache.may_impersonate_anyone() is False


@pytest.mark.asyncio
async def test_ttl_expires_entries(http: httpx.AsyncClient, identity: FastAPI) -> None:
    now = [0.0]
    token = make_token("admin1")
    cache = ImpersonationAuthorizationCache(
        token=lambda: token,
        http=lambda: http,
        auth_redirect=f"{AUTH}/login",
        ttl_seconds=60,
        clock=lambda: now[0],
    )

    await cache.may_impersonate("user1")
    now[0] = 30
    await cache.may_impersonate("user1")
    assert len(identity.state.calls.may_impersonate) == 1

    now[0] = 61
    await cache.may_impersonate("user1")
    assert len(identity.state.calls.may_impersonate) == 2


@pytest.mark.asyncio
async def test_cache_is_keyed_by_token(api: APIBase, identity: FastAPI) -> None:
    await api.init(make_token("admin1"))
    assert await api.may_impersonate("user1") is True
    await api.impersonate("user1")
    assert await api.may_impersonate("user2") is False
    assert await api.may_impersonate("user1") is False
    assert len(identity.state.calls.may_impersonate) == 3
