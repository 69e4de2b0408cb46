"""
unified_api_client.client

HTTP client package.

Responsibilities:
- Request execution and response classification.
- GraphQL envelopes and multipart file uploads.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Everything here goes through an injected `httpx.AsyncClient`; no module opens its own.
