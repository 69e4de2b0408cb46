"""
unified_api_client.client.executor

Authenticated request pipeline.

Responsibilities:
- Wait for the token store to be ready, then attach the bearer token to every call.
- Classify responses (success, inline validation, 401, other rejections).
- Mirror every failure to the Notifier before re-raising it.
- GraphQL envelopes, including the multipart upload variant.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import httpx
import structlog

from unified_api_client.auth.token_store import TokenStore
from unified_api_client.client.query import QueryPayload, stringify_query
from unified_api_client.client.upload_transport import ProgressCallback, upload_with_progress
from unified_api_client.client.uploads import FileUpload, replace_files
from unified_api_client.collaborators import LocationProvider, Notifier, Redirector
from unified_api_client.errors import (
    ApiClientError,
    GraphQLError,
    RemoteRejectionError,
    TransportError,
    UnauthorizedError,
    UploadError,
)
from unified_api_client.observability.logging import get_logger

log = get_logger(__name__)


def _is_json(resp: httpx.Response) -> bool:
    return "application/json" in resp.headers.get("content-type", "")


def _rejection_message(body: Any, status_text: str) -> str:
    if isinstance(body, str):
        return body or status_text
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    if isinstance(body, list) and body and isinstance(body[0], dict) and body[0].get("message"):
        return str(body[0]["message"])
    return status_text


class RequestExecutor:
    def __init__(
        self,
        *,
        api_base: str,
        tokens: TokenStore,
        notifier: Notifier,
        redirector: Redirector,
        location: LocationProvider,
        login_redirect: Callable[[str], str],
        graphql_path: str = "/graphql",
    ) -> None:
        self._api_base = api_base.rstrip("/")
        self._tokens = tokens
        self._notify = notifier
        self._redirect = redirector
        self._location = location
        self._login_redirect = login_redirect
        self._graphql_path = graphql_path
        self._keepalive: set[asyncio.Future[httpx.Response]] = set()

    def _headers(self, *, has_body: bool) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._tokens.token or ''}",
            "Accept": "application/json",
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _fail(self, exc: ApiClientError) -> ApiClientError:
        self._notify(exc.message)
        return exc

    async def request(
        self,
        path: str,
        method: str,
        *,
        body: Any = None,
        query: QueryPayload | None = None,
        inline_validation: bool = False,
        keepalive: bool = False,
    ) -> Any:
        await self._tokens.ready()
        url = self._api_base + path + stringify_query(query)
        has_body = body is not None

        with structlog.contextvars.bound_contextvars(method=method, path=path):
            try:
                resp = await self._send(
                    method,
                    url,
                    headers=self._headers(has_body=has_body),
                    content=json.dumps(body) if has_body else None,
                    keepalive=keepalive,
                )
            except httpx.RequestError as e:
                log.warning("request_transport_failed", error=str(e))
                raise self._fail(TransportError(f"Network error: {e}")) from e

            try:
                return self._classify(resp, inline_validation=inline_validation)
            except ApiClientError as e:
                log.info("request_failed", status=resp.status_code, error=e.message)
                raise self._fail(e)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        content: str | None,
        keepalive: bool,
    ) -> httpx.Response:
        http = self._tokens.http
        if not keepalive:
            return await http.request(method, url, headers=headers, content=content)

        # Keepalive requests outlive the caller: cancellation of the awaiting task
        # does not cancel the send, and `drain()` waits for it.
        fut = asyncio.ensure_future(http.request(method, url, headers=headers, content=content))
        self._keepalive.add(fut)
        fut.add_done_callback(self._settle_keepalive)
        return await asyncio.shield(fut)

    def _settle_keepalive(self, fut: asyncio.Future[httpx.Response]) -> None:
        self._keepalive.discard(fut)
        # Read the outcome here; the caller that started the send may be gone.
        if not fut.cancelled() and fut.exception() is not None:
            log.debug("keepalive_request_failed", error=str(fut.exception()))

    def _classify(self, resp: httpx.Response, *, inline_validation: bool) -> Any:
        is_json = _is_json(resp)
        if resp.is_success or (resp.status_code == 422 and inline_validation):
            try:
                return resp.json() if is_json else resp.text
            except ValueError as e:
                raise TransportError("Malformed JSON response") from e

        if resp.status_code == 401:
            location = self._login_redirect(self._location())
            self._redirect(location)
            raise UnauthorizedError(location=location)

        try:
            body: Any = resp.json() if is_json else resp.text
        except ValueError:
            body = None
        raise RemoteRejectionError(
            status=resp.status_code,
            message=_rejection_message(body, resp.reason_phrase),
            body=body,
        )

    async def drain(self) -> None:
        """Wait for in-flight keepalive requests."""
        if self._keepalive:
            await asyncio.gather(*self._keepalive, return_exceptions=True)

    # -- verbs ---------------------------------------------------------------

    async def get(self, path: str, query: QueryPayload | None = None) -> Any:
        return await self.request(path, "GET", query=query)

    async def post(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        """Use `validated_post` when the user is filling in a form, so they get inline errors."""
        return await self.request(path, "POST", body=body, query=query)

    async def put(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        return await self.request(path, "PUT", body=body, query=query)

    async def patch(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        return await self.request(path, "PATCH", body=body, query=query)

    async def delete(self, path: str, query: QueryPayload | None = None, body: Any = None) -> Any:
        # Sending a JSON body with DELETE is allowed but not recommended.
        return await self.request(path, "DELETE", body=body, query=query)

    async def validated_post(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        """
        For form submissions. Expect a validated response such as
        `{"success": False, "messages": [{"type": "error", "message": "...", "path": "name"}]}`;
        a 422 comes back as data instead of raising.
        """
        return await self.request(path, "POST", body=body, query=query, inline_validation=True)

    async def validated_put(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        return await self.request(path, "PUT", body=body, query=query, inline_validation=True)

    async def validated_patch(self, path: str, body: Any = None, query: QueryPayload | None = None) -> Any:
        return await self.request(path, "PATCH", body=body, query=query, inline_validation=True)

    # -- graphql -------------------------------------------------------------

    @staticmethod
    def _envelope(query: str, variables: Any, query_signature: str | None) -> dict[str, Any]:
        extensions = {"querySignature": query_signature} if query_signature else {}
        return {"query": query, "variables": variables, "extensions": extensions}

    def _unpack(self, payload: Any) -> Any:
        if not isinstance(payload, dict):
            raise self._fail(TransportError("GraphQL response was not a JSON object"))
        errors = payload.get("errors")
        if errors:
            log.info("graphql_errors", count=len(errors))
            raise self._fail(GraphQLError(list(errors)))
        return payload.get("data")

    async def graphql(self, query: str, variables: Any = None, query_signature: str | None = None) -> Any:
        """
        POST to the GraphQL endpoint and return `data`.

        GraphQL errors arrive inside a 200 response; the first message is
        surfaced and `GraphQLError` raised with the full list.
        """
        payload = await self.request(
            self._graphql_path,
            "POST",
            body=self._envelope(query, variables, query_signature),
        )
        return self._unpack(payload)

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
        """
        Like `graphql`, but `FileUpload` values anywhere in `variables` are sent as
        multipart parts `file0..fileN-1` next to a `body` part holding the envelope.

        `omit_uploads=True` (live validation while a form is being edited) sends
        the placeholders without the file bytes through the plain JSON path.
        """
        files: list[FileUpload] = []
        variables = replace_files(variables, files)
        if not files or omit_uploads:
            return await self.graphql(query, variables, query_signature)

        await self._tokens.ready()
        envelope = json.dumps(self._envelope(query, variables, query_signature))
        parts = [(f"file{i}", (f.name, f.content, f.mime_type)) for i, f in enumerate(files)]

        with structlog.contextvars.bound_contextvars(method="POST", path=self._graphql_path):
            log.info("upload_started", files=len(files))
            try:
                resp = await upload_with_progress(
                    self._tokens.http,
                    self._api_base + self._graphql_path,
                    headers={
                        "Authorization": f"Bearer {self._tokens.token or ''}",
                        "Accept": "application/json",
                    },
                    data={"body": envelope},
                    files=parts,
                    on_progress=on_progress,
                    abort=abort,
                )
            except UploadError as e:
                log.warning("upload_failed", error=e.message, status=e.status)
                raise self._fail(e)

            try:
                payload = resp.json()
            except ValueError as e:
                raise self._fail(UploadError("Upload response was not valid JSON", status=resp.status_code)) from e
            return self._unpack(payload)


# --- Module Notes -----------------------------------------------------------
# 401 navigates away, so callers awaiting a result normally never see the
# UnauthorizedError; it is raised so nothing after the call runs in the meantime.
