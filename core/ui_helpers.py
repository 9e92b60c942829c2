"""
core/ui_helpers.py
------------------
Shared backend request helpers for all Streamlit pages.
Ensures consistent error handling and caching.
"""

from __future__ import annotations

import requests
import streamlit as st

from core.ui_config import BACKEND_URL, CACHE_TTL


def _url(endpoint: str) -> str:
    return f"{BACKEND_URL.rstrip('/')}/{endpoint.lstrip('/')}"


def _error_detail(resp: requests.Response) -> str:
    try:
        return resp.json().get("detail") or resp.reason
    except ValueError:
        return resp.reason


@st.cache_data(ttl=CACHE_TTL)
def fetch_backend(endpoint: str, params: dict | None = None) -> dict | list:
    """
    Unified safe fetch for GET endpoints.
    Automatically prefixes BACKEND_URL and handles JSON decoding.
    """
    try:
        resp = requests.get(_url(endpoint), params=params, timeout=20)
        if not resp.ok:
            st.error(f"Backend request failed ({resp.status_code}): {_error_detail(resp)}")
            return {}
        return resp.json()
    except (requests.RequestException, ValueError) as e:
        st.error(f"Backend request failed: {e}")
        return {}


def post_backend(endpoint: str, payload: dict) -> dict:
    """Unified POST helper."""
    try:
        resp = requests.post(_url(endpoint), json=payload, timeout=60)
        if not resp.ok:
            st.error(f"Backend POST failed ({resp.status_code}): {_error_detail(resp)}")
            return {}
        return resp.json()
    except (requests.RequestException, ValueError) as e:
        st.error(f"Backend POST failed: {e}")
        return {}


def delete_backend(endpoint: str, payload: dict) -> dict:
    """DELETE with a JSON body (brief deletion, chat reset)."""
    try:
        resp = requests.delete(_url(endpoint), json=payload, timeout=20)
        if not resp.ok:
            st.error(f"Backend DELETE failed ({resp.status_code}): {_error_detail(resp)}")
            return {}
        return resp.json()
    except (requests.RequestException, ValueError) as e:
        st.error(f"Backend DELETE failed: {e}")
        return {}
