# ui/components/backend_status.py
"""
Centralized backend health indicator for Streamlit pages.

Features
--------
✅ Reads BACKEND_URL and the cache TTL from the shared Settings.
✅ Type-safe: Uses Pydantic to validate the /health schema.
✅ Graceful fallback: Never crashes the UI when the backend is offline.
✅ Lists which integrations (Supabase, Serper, OpenAI, ...) are configured.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests
import streamlit as st
from pydantic import BaseModel, Field

from core.ui_config import BACKEND_URL, CACHE_TTL

STATUS_COLORS = {
    "ok": "green",
    "healthy": "green",
    "degraded": "orange",
    "error": "red",
    "offline": "red",
}


# --------------------------------------------------------------------------- #
# Typed Health Schema
# --------------------------------------------------------------------------- #

class HealthSchema(BaseModel):
    """Structured schema for the /health endpoint response."""
    status: str = Field(default="unknown", description="Overall backend status")
    message: Optional[str] = Field(default=None, description="Optional status message")
    version: Optional[str] = Field(default=None, description="Backend version string")
    supabase_connected: Optional[bool] = Field(default=None, description="Supabase connectivity flag")
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    cpu_load: Optional[float] = Field(default=None, description="Backend CPU load")
    memory_usage: Optional[float] = Field(default=None, description="Backend memory usage in MB")
    uptime_sec: Optional[float] = Field(default=None, description="Seconds since backend start")
    integrations: Dict[str, bool] = Field(default_factory=dict, description="Configured collaborators")
    latency_ms: Optional[float] = Field(default=None, description="Approximate round-trip latency in ms")


def get_status_color(status: str) -> str:
    """Public helper for coloring elements dynamically by status."""
    return STATUS_COLORS.get(status.lower(), "gray")


# --------------------------------------------------------------------------- #
# Health Fetcher (cached + resilient)
# --------------------------------------------------------------------------- #

@st.cache_data(ttl=CACHE_TTL)
def get_backend_status() -> Dict[str, Any]:
    """
    Fetch the backend /health endpoint with structured fallback.

    Returns
    -------
    dict
        Validated HealthSchema dump or a structured error dict.
    """
    url = f"{BACKEND_URL}/health"
    try:
        resp = requests.get(url, timeout=5)
        if resp.status_code != 200:
            return {"status": "error", "message": f"HTTP {resp.status_code}: {resp.text[:100]}"}
        data = resp.json()
        data["latency_ms"] = round(resp.elapsed.total_seconds() * 1000, 2)
        return HealthSchema(**data).model_dump()
    except requests.exceptions.RequestException as e:
        return {
            "status": "offline",
            "message": f"Backend unreachable at {BACKEND_URL} ({e.__class__.__name__})",
        }
    except ValueError as e:
        return {"status": "error", "message": f"Malformed health payload: {e}"}


# --------------------------------------------------------------------------- #
# UI Renderer
# --------------------------------------------------------------------------- #

def render_status_bar(expanded: bool = False) -> None:
    """Render a compact backend health summary in the sidebar."""
    st.sidebar.markdown("---")
    st.sidebar.caption("### 🔍 Backend Status")

    health = get_backend_status()
    status = health.get("status", "unknown")
    st.sidebar.markdown(
        f"<span style='color:{get_status_color(status)}; font-weight:600;'>● {status.upper()}</span>",
        unsafe_allow_html=True,
    )

    msg = health.get("message")
    if msg:
        st.sidebar.caption(f"💬 {msg}")

    if health.get("supabase_connected") is False:
        st.sidebar.caption("🗄️ Supabase unavailable: briefs and network pages are unavailable")

    integrations = health.get("integrations") or {}
    if integrations:
        enabled = [name for name, on in integrations.items() if on]
        st.sidebar.caption(f"🔌 Integrations: {', '.join(enabled) or 'none'}")

    if expanded:
        with st.sidebar.expander("Advanced diagnostics", expanded=False):
            if health.get("latency_ms"):
                st.write(f"⏱ Latency: {health['latency_ms']} ms")
            if health.get("cpu_load") is not None:
                st.write(f"🧠 CPU load: {health['cpu_load']}%")
            if health.get("memory_usage") is not None:
                st.write(f"💾 Memory: {health['memory_usage']} MB")
            if health.get("version"):
                st.write(f"🧩 Version: {health['version']}")
            st.json(health)
