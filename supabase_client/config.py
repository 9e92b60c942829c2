# supabase_client/config.py
"""
Supabase client factory.

Clients are cached per (url, key) so every request reuses one connection pool.
"""

from __future__ import annotations

from functools import lru_cache

from supabase import Client, create_client

from core.config import Settings


@lru_cache(maxsize=4)
def _client(url: str, key: str) -> Client:
    return create_client(url, key)


def get_supabase_client(settings: Settings) -> Client:
    """Return an authenticated Supabase client for the configured project."""
    if not settings.supabase_enabled:
        raise RuntimeError("Supabase credentials not set (SUPABASE_URL + service-role or anon key).")
    return _client(settings.supabase_url, settings.supabase_key)
