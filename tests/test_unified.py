"""
tests.test_unified

Unified Auth URL shapes and the boot sequence.
"""

from __future__ import annotations

import pytest

from conftest import make_token
from unified_api_client.api import APIBase
from unified_api_client.auth import unified
from unified_api_client.auth.unified import BootRedirect
from unified_api_client.errors import UnauthorizedError


def test_logout_url_replaces_last_path_segment() -> None:
    assert (
        unified.logout_url("https://auth.example.edu/app/login?x=1", "tok")
        == "https://auth.example.edu/app/logout?x=1&unifiedJwt=tok"
    )
    assert unified.logout_url("https://auth.example.edu/login", "tok") == "https://auth.example.edu/logout?unifiedJwt=tok"


def test_identity_endpoint_uses_origin() -> None:
    assert unified.identity_endpoint("https://auth.example.edu/app/login?x=1", "/impersonate") == (
        "https://auth.example.edu/impersonate"
    )


def test_login_redirect_sets_requested_url(api: APIBase) -> None:
    assert unified.login_redirect(api, "http://app.test/a?b=c") == (
        "http://auth.test/app/login?requestedUrl=http%3A%2F%2Fapp.test%2Fa%3Fb%3Dc"
    )


@pytest.mark.asyncio
async def test_handle_consumes_token_and_strips_it_from_url(api: APIBase) -> None:
    token = make_token("user1")
    result = await unified.handle(api, f"http://app.test/page?unifiedJwt={token}&tab=2")

    assert result == BootRedirect(location="http://app.test/page?tab=2")
    assert api.token == token


@pytest.mark.asyncio
async def test_handle_prefers_requested_url(api: APIBase) -> None:
    token = make_token("user1")
    result = await unified.handle(
        api, f"http://app.test/?unifiedJwt={token}&requestedUrl=http%3A%2F%2Fapp.test%2Fdeep"
    )
    assert result == BootRedirect(location="http://app.test/deep")


@pytest.mark.asyncio
async def test_handle_requires_auth_by_default(api: APIBase) -> None:
    with pytest.raises(UnauthorizedError) as exc_info:
        await unified.handle(api, "http://app.test/private")
    assert exc_info.value.location.startswith("http://auth.test/app/login?requestedUrl=")


@pytest.mark.asyncio
async def test_handle_allows_public_pages(api: APIBase) -> None:
    assert await unified.handle(api, "http://app.test/public", allow_unauthenticated=True) is None
    assert api.tokens.latch.is_ready


@pytest.mark.asyncio
async def test_handle_with_stored_token_passes(api: APIBase) -> None:
    api.session.storage.set("token", make_token("user1"))
    assert await unified.handle(api, "http://app.test/private") is None
