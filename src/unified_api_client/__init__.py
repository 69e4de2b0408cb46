"""
unified_api_client

Top-level package for the Unified Auth API client.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Hosts import `unified_api_client.api.APIBase`; nothing is imported eagerly here.
