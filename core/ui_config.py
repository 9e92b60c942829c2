"""
core/ui_config.py
-----------------
Central configuration hub for all Streamlit UI pages.

- Reads the backend URL and cache TTL from the shared Settings object.
- Provides global constants for API access.
"""

from __future__ import annotations

from core.config import get_settings

# ---------------------------------------------------------------------------
# Backend configuration
# ---------------------------------------------------------------------------

_settings = get_settings()

BACKEND_URL: str = _settings.backend_url.rstrip("/")
CACHE_TTL: int = _settings.ui_cache_ttl
