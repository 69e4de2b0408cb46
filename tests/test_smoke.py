"""
tests.test_smoke

End-to-end smoke test: one client session against the fake API and identity service.
"""

from __future__ import annotations

import pytest

from conftest import ApiStub, make_token
from unified_api_client.analytics.events import InteractionEvent
from unified_api_client.api import create_api
from unified_api_client.auth.models import Impersonating
from unified_api_client.collaborators import RecordingRedirector


@pytest.mark.asyncio
async def test_session_lifecycle(settings, http, stub: ApiStub) -> None:
    stub.on("GET", "/me", json={"id": "admin1"})
    stub.on("POST", "/graphql", json={"data": {"ok": True}})
    stub.on("POST", "/analytics", 204)
    redirector = RecordingRedirector()
    notes: list[str] = []

    api = create_api(settings=settings, http=http, redirector=redirector, notifier=notes.append)
    async with api:
        await api.init(make_token("admin1"))
        assert await api.get("/me") == {"id": "admin1"}

        assert await api.may_impersonate("user1") is True
        await api.impersonate("user1")
        assert isinstance(api.impersonation_status(), Impersonating)
        assert await api.graphql("{ ok }") == {"ok": True}

        api.record_interaction(InteractionEvent(event_type="click", action="press", screen="/"))
        api.exit_impersonation()

    # Closing flushes analytics even though the debounce window never elapsed.
    assert stub.requests[-1].url.path == "/analytics"
    assert notes == []
    assert redirector.locations == []
