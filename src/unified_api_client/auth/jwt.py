"""
unified_api_client.auth.jwt

JWT claim helpers.

Responsibilities:
- Decode Unified Auth tokens without verifying them (the API verifies; the client
  only reads claims for display and routing decisions).
- Derive impersonation status from the `act` (actor) claim.

Note:
- Never make an authorization decision from these claims; they are unverified.
"""

from __future__ import annotations

from typing import Any

import jwt
from jwt import InvalidTokenError

from unified_api_client.auth.models import Impersonating, ImpersonationStatus, NotImpersonating


class ClaimsDecodeError(Exception):
    pass


def decode_claims(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False, "verify_aud": False},
        )
    except InvalidTokenError as e:
        raise ClaimsDecodeError(str(e)) from e


def subject_of(token: str | None) -> str | None:
    if not token:
        return None
    try:
        sub = decode_claims(token).get("sub")
    except ClaimsDecodeError:
        return None
    return str(sub) if sub is not None else None


def impersonation_status(token: str | None) -> ImpersonationStatus:
    """
    Read delegation from the token itself so a token that arrived via the URL is
    classified the same as one obtained through `impersonate()`.

    Malformed tokens are reported as not impersonating.
    """

    if not token:
        return NotImpersonating()
    try:
        payload = decode_claims(token)
    except ClaimsDecodeError:
        return NotImpersonating()

    act = payload.get("act")
    if isinstance(act, dict) and act.get("sub"):
        return Impersonating(
            impersonated_user=str(payload.get("sub", "")),
            impersonated_by=str(act["sub"]),
        )
    return NotImpersonating()


# --- Module Notes -----------------------------------------------------------
# The `act.sub` claim shape (RFC 8693 actor claim) is the contract with Unified Auth.
