"""
unified_api_client.auth

Authentication package.

Responsibilities:
- Session context, token persistence and readiness.
- Impersonation lifecycle and authorization checks against Unified Auth.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing here imports `client`; the executor depends on auth, never the reverse.
