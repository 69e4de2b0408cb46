"""
unified_api_client.auth.models

Auth domain models.

Responsibilities:
- Define the impersonation status variants returned by `TokenStore.impersonation_status()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class NotImpersonating:
    is_impersonating: Literal[False] = False


@dataclass(frozen=True, slots=True)
class Impersonating:
    """
    The current token was delegated: `impersonated_by` is acting as `impersonated_user`.
    """

    impersonated_user: str
    impersonated_by: str
    is_impersonating: Literal[True] = True


ImpersonationStatus = NotImpersonating | Impersonating


# --- Module Notes -----------------------------------------------------------
# Callers can branch with `match status: case Impersonating(impersonated_by=who): ...`.
