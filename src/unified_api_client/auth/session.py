"""
unified_api_client.auth.session

Session context shared by every component of one client.

Responsibilities:
- Hold the current bearer token and the original (pre-impersonation) token.
- Mirror every token mutation into tab-scoped session storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

TOKEN_KEY = "token"
ORIGINAL_TOKEN_KEY = "originalToken"


class SessionStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemorySessionStorage:
    """Process-local storage; lives exactly as long as the client that owns it."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._slots: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        self._slots[key] = value

    def remove(self, key: str) -> None:
        self._slots.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._slots


@dataclass(slots=True)
class Session:
    """
    Mutable token state for one browser-tab equivalent.

    `original_token` is only ever set while `current_token` holds a delegated
    token; the setters below keep storage in step with memory.
    """

    storage: SessionStorage = field(default_factory=MemorySessionStorage)
    current_token: str | None = None
    original_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.current_token)

    @property
    def is_impersonating(self) -> bool:
        return self.original_token is not None

    def set_token(self, token: str) -> None:
        self.current_token = token
        self.storage.set(TOKEN_KEY, token)

    def set_original_token(self, token: str) -> None:
        if not self.current_token:
            raise ValueError("original token requires a current token")
        self.original_token = token
        self.storage.set(ORIGINAL_TOKEN_KEY, token)

    def clear_original_token(self) -> None:
        self.original_token = None
        self.storage.remove(ORIGINAL_TOKEN_KEY)

    def load(self) -> None:
        # Only fills an empty slot; a token set earlier in the same tick wins.
        if self.current_token is None:
            self.current_token = self.storage.get(TOKEN_KEY) or None

    def restore_original_token(self) -> None:
        if self.original_token is None and self.current_token:
            self.original_token = self.storage.get(ORIGINAL_TOKEN_KEY) or None

    def clear(self) -> None:
        self.current_token = None
        self.original_token = None
        self.storage.remove(TOKEN_KEY)
        self.storage.remove(ORIGINAL_TOKEN_KEY)


# --- Module Notes -----------------------------------------------------------
# Only `auth.token_store.TokenStore` calls the mutators; everything else reads.
