# supabase_client/helpers.py
"""
Best-effort utility layer for Supabase.

Features
--------
- Safe wrappers for inserting and fetching records that never raise.
- Automatic timestamp fallback (for tables without default `created_at`).
- Optional verbose debug logging for diagnostics.

Use these where a failed write/read must not fail the request (feedback,
curated intelligence, health probes). Anything that must surface errors goes
through `database.queries` instead.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from loguru import logger
from supabase import Client


def insert_record(
    sb: Client,
    table: str,
    data: Dict[str, Any],
    debug: bool = True,
) -> Dict[str, Any]:
    """
    Insert a record into a Supabase table safely.

    Parameters
    ----------
    sb : supabase.Client
        Connected client.
    table : str
        Target table name in Supabase.
    data : dict
        Dictionary of column names and values.
    debug : bool
        If True, logs detailed output.

    Returns
    -------
    dict
        Inserted row or empty dict on failure.
    """
    try:
        payload = dict(data)
        if "created_at" not in payload:
            payload["created_at"] = dt.datetime.now(dt.timezone.utc).isoformat()

        if debug:
            logger.debug(f"[Supabase] → Inserting into '{table}' (keys: {list(payload.keys())})")

        res = sb.table(table).insert(payload).execute()
        rows = res.data or []

        if debug:
            logger.debug(f"[Supabase] ✅ Insert success → {len(rows)} row(s)")

        return rows[0] if rows else {}

    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Supabase] ⚠️ Insert into '{table}' failed: {type(e).__name__}: {e}")
        return {}


def fetch_recent(
    sb: Client,
    table: str,
    limit: int = 10,
    debug: bool = True,
) -> List[Dict[str, Any]]:
    """
    Fetch the newest records of a table, or [] on any error.
    """
    try:
        if debug:
            logger.debug(f"[Supabase] → Fetching latest {limit} from '{table}'")

        res = (
            sb.table(table)
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        records = res.data or []
        if debug:
            logger.debug(f"[Supabase] ← Got {len(records)} records")
        return records

    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Supabase] ⚠️ Fetch from '{table}' failed: {e}")
        return []


def check_connection(sb: Client, table: str = "providers") -> Optional[str]:
    """
    Verify connectivity with a one-row select.

    Returns
    -------
    Optional[str]
        None on success, otherwise the exception class name.
    """
    try:
        sb.table(table).select("id").limit(1).execute()
        logger.debug("[Supabase] ✅ Connection OK")
        return None
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Supabase] ❌ Connection failed: {e}")
        return e.__class__.__name__
