"""
core/health.py
--------------
System health diagnostics for the Sleft Signals backend.

Purpose
-------
- Used by the FastAPI `/health` endpoint and the Streamlit sidebar.
- Pings Supabase with a one-row read on `providers`.
- Reports uptime, version, CPU/memory usage and platform.
- Returns a JSON-safe dict matching the UI `HealthSchema`.
"""

from __future__ import annotations

import platform
import time
from typing import Any, Dict, Optional

import psutil
from supabase import Client

from core.config import Settings
from supabase_client.helpers import check_connection


# Cache the process start time for uptime calculation
START_TIME = time.time()


def system_health(settings: Settings, sb: Optional[Client] = None) -> Dict[str, Any]:
    """
    Return structured backend health diagnostics.

    Parameters
    ----------
    settings : Settings
        Loaded configuration (version, Supabase URL).
    sb : supabase.Client, optional
        Connected client; None when Supabase is not configured.

    Returns
    -------
    dict
        JSON-safe health report compatible with the UI HealthSchema.
    """
    status = "ok"
    message = "Backend operational."
    supabase_connected = False

    # --- Supabase connectivity test ---
    if sb is None:
        status = "degraded"
        message = "Supabase is not configured."
    else:
        failure = check_connection(sb, table="providers")
        if failure is None:
            supabase_connected = True
        else:
            status = "degraded"
            message = f"Supabase check failed: {failure}"

    # --- System metrics ---
    try:
        cpu_load = psutil.cpu_percent(interval=0.2)
        memory_usage = round(psutil.virtual_memory().used / (1024 * 1024), 2)
    except (psutil.Error, OSError):
        cpu_load = None
        memory_usage = None

    return {
        "status": status,
        "message": message,
        "version": settings.backend_version,
        "supabase_connected": supabase_connected,
        "supabase_url": settings.supabase_url,
        "cpu_load": cpu_load,
        "memory_usage": memory_usage,
        "uptime_sec": round(time.time() - START_TIME, 2),
        "system": platform.system(),
        "release": platform.release(),
        "integrations": settings.integrations(),
    }
