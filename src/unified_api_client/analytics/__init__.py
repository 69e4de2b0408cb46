"""
unified_api_client.analytics

Usage analytics package.

Responsibilities:
- Interaction event model.
- Batched, debounced delivery to the analytics endpoint.
- Navigation recording.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Delivery goes through `RequestExecutor` with keepalive; this package never touches httpx.
