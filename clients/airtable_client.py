"""
clients/airtable_client.py
--------------------------
Airtable REST client used for lead capture and user registration records.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from loguru import logger

from core.config import Settings

AIRTABLE_API = "https://api.airtable.com/v0"


class AirtableError(RuntimeError):
    """Airtable answered with a non-2xx status."""


class AirtableClient:
    def __init__(self, api_key: str, base_id: str, timeout: float = 15.0,
                 session: Optional[requests.Session] = None):
        if not api_key or not base_id:
            raise ValueError("AIRTABLE_API_KEY and AIRTABLE_BASE_ID must be set")
        self.api_key = api_key
        self.base_id = base_id
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "AirtableClient":
        return cls(api_key=settings.airtable_api_key or "", base_id=settings.airtable_base_id or "")

    def create_record(self, table: str, fields: Dict[str, Any]) -> str:
        """Create one record in `table` and return its Airtable id."""
        url = f"{AIRTABLE_API}/{self.base_id}/{quote(table, safe='')}"
        resp = self.session.post(
            url,
            json={"records": [{"fields": fields}]},
            headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
            timeout=self.timeout,
        )
        if not resp.ok:
            raise AirtableError(f"Airtable API error {resp.status_code}: {resp.text[:200]}")

        record_id = resp.json()["records"][0]["id"]
        logger.info(f"[Airtable] ✅ Record created in '{table}': {record_id}")
        return record_id
