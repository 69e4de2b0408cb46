"""
unified_api_client.observability

Observability package.

Responsibilities:
- Structured logging configuration.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Request-scoped fields are bound in `client.executor` via structlog contextvars.
