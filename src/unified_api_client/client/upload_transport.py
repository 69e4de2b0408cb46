"""
unified_api_client.client.upload_transport

Multipart POST with upload progress and abort.

Responsibilities:
- Encode form fields + files with httpx and stream the body through a progress counter.
- Report `UploadProgress` per chunk and `None` once the upload settles.
- Map abort, network failure and non-2xx status to `UploadError`.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from unified_api_client.errors import UploadError


@dataclass(frozen=True, slots=True)
class UploadProgress:
    loaded: int
    total: int | None
    # None while the total size is unknown.
    ratio: float | None


ProgressCallback = Callable[[UploadProgress | None], None]


def _progress_body(
    stream: Any, total: int | None, on_progress: ProgressCallback | None
) -> AsyncIterator[bytes]:
    async def gen() -> AsyncIterator[bytes]:
        loaded = 0
        async for chunk in stream:
            loaded += len(chunk)
            if on_progress is not None:
                ratio = min(loaded / total, 1.0) if total else None
                on_progress(UploadProgress(loaded=loaded, total=total, ratio=ratio))
            yield chunk

    return gen()


async def upload_with_progress(
    http: httpx.AsyncClient,
    url: str,
    *,
    headers: dict[str, str],
    data: dict[str, str],
    files: list[tuple[str, tuple[str, bytes, str]]],
    on_progress: ProgressCallback | None = None,
    abort: asyncio.Event | None = None,
) -> httpx.Response:
    encoded = http.build_request("POST", url, headers=headers, data=data, files=files)
    length = encoded.headers.get("Content-Length")
    total = int(length) if length else None
    request = httpx.Request(
        "POST",
        url,
        headers=encoded.headers,
        content=_progress_body(encoded.stream, total, on_progress),
    )

    try:
        resp = await _send(http, request, abort)
    except httpx.RequestError as e:
        raise UploadError(f"Upload failed: {e}") from e
    finally:
        # UI progress bars go idle whether or not the upload worked.
        if on_progress is not None:
            on_progress(None)

    if not resp.is_success:
        raise UploadError(f"Upload failed with status {resp.status_code}", status=resp.status_code)
    return resp


async def _send(
    http: httpx.AsyncClient, request: httpx.Request, abort: asyncio.Event | None
) -> httpx.Response:
    if abort is None:
        return await http.send(request)

    send = asyncio.ensure_future(http.send(request))
    aborted = asyncio.ensure_future(abort.wait())
    try:
        await asyncio.wait({send, aborted}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        send.cancel()
        raise
    finally:
        aborted.cancel()
    if not send.done():
        send.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await send
        raise UploadError("Upload aborted")
    return send.result()


# --- Module Notes -----------------------------------------------------------
# Content-Length from the encoded multipart request is kept on the streamed copy so
# servers see a sized body rather than chunked transfer encoding.
