"""
unified_api_client.auth.unified

Unified Auth integration: URL shapes and the boot sequence.

Responsibilities:
- Build login, logout and identity-service endpoint URLs from `auth_redirect`.
- `handle()`: consume a `unifiedJwt` handed back by Unified Auth and strip it from the URL.
- `require_auth()`: refuse to continue without a token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from unified_api_client.errors import UnauthorizedError

if TYPE_CHECKING:
    from unified_api_client.api import APIBase


@dataclass(frozen=True, slots=True)
class BootRedirect:
    """Returned by `handle()` when the host must navigate before rendering."""

    location: str


def _with_query_param(url: str, key: str, value: str) -> str:
    parts = urlsplit(url)
    params = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != key]
    params.append((key, value))
    return urlunsplit(parts._replace(query=urlencode(params)))


def _without_query_param(url: str, key: str) -> str:
    parts = urlsplit(url)
    params = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != key]
    return urlunsplit(parts._replace(query=urlencode(params)))


def _query_param(url: str, key: str) -> str | None:
    for k, v in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if k == key:
            return v
    return None


def login_redirect(api: APIBase, current_url: str) -> str:
    """Default `loginRedirect`: the login page, told where to send the user back to."""
    return _with_query_param(api.auth_redirect, "requestedUrl", current_url)


def logout_url(auth_redirect: str, token: str) -> str:
    # Sibling of the login page: https://auth.example.edu/app/login -> /app/logout
    parts = urlsplit(auth_redirect)
    segments = parts.path.split("/")[:-1]
    path = "/".join([*segments, "logout"])
    if not path.startswith("/"):
        path = "/" + path
    return _with_query_param(urlunsplit(parts._replace(path=path)), "unifiedJwt", token)


def identity_endpoint(auth_redirect: str, path: str) -> str:
    parts = urlsplit(auth_redirect)
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


async def handle(api: APIBase, url: str, *, allow_unauthenticated: bool = False) -> BootRedirect | None:
    """
    Root-layout boot hook.

    By default unauthenticated users are sent to Unified Auth before anything
    renders. Public pages pass `allow_unauthenticated=True` and rely on the API
    answering 401 instead.
    """

    unified_jwt = _query_param(url, "unifiedJwt") or None
    await api.init(unified_jwt)
    if unified_jwt:
        requested = _query_param(url, "requestedUrl")
        return BootRedirect(location=requested or _without_query_param(url, "unifiedJwt"))
    if not allow_unauthenticated:
        require_auth(api, url)
    return None


def require_auth(api: APIBase, url: str) -> None:
    if not api.token:
        raise UnauthorizedError(location=api.login_redirect(api, url), message="Authentication required")


# --- Module Notes -----------------------------------------------------------
# `handle` returns the redirect instead of performing it; the host decides whether
# that is a 302 (server render) or a client-side navigation.
