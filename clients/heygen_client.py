"""
clients/heygen_client.py
------------------------
HeyGen streaming-avatar REST client.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from core.config import Settings

STREAMING_SESSION_DEFAULTS: Dict[str, Any] = {
    "quality": "medium",
    "voice": {"rate": 1},
    "video_encoding": "VP8",
    "disable_idle_timeout": False,
    "version": "v2",
    "stt_settings": {"provider": "deepgram", "confidence": 0.55},
    "activity_idle_timeout": 120,
}


class HeyGenError(RuntimeError):
    """Non-2xx answer from HeyGen; carries the upstream status and payload."""

    def __init__(self, status_code: int, payload: Any):
        super().__init__(f"HeyGen API error: {status_code}")
        self.status_code = status_code
        self.payload = payload


class HeyGenClient:
    def __init__(self, api_key: str, base_url: str = "https://api.heygen.com",
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        if not api_key:
            raise ValueError("HEYGEN_API_KEY must be set")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "HeyGenClient":
        return cls(api_key=settings.heygen_api_key or "", base_url=settings.heygen_base_url)

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        resp = self.session.request(
            method,
            f"{self.base_url}/{path}",
            json=payload,
            headers={"accept": "application/json", "x-api-key": self.api_key},
            timeout=self.timeout,
        )
        if not resp.ok:
            try:
                body: Any = resp.json()
            except ValueError:
                body = {"error": resp.text[:500]}
            raise HeyGenError(resp.status_code, body)
        return resp.json()

    def create_token(self) -> str:
        data = self._request("POST", "v1/streaming.create_token")
        token = (data.get("data") or {}).get("token")
        if not token:
            raise HeyGenError(500, {"error": "Invalid token response from HeyGen"})
        return token

    def list_avatars(self) -> Dict[str, Any]:
        return self._request("GET", "v2/avatars")

    def new_streaming_session(self) -> Dict[str, Any]:
        return self._request("POST", "v1/streaming.new", STREAMING_SESSION_DEFAULTS)

    def speak(self, session_id: str, text: str) -> Optional[str]:
        """Have the avatar in `session_id` say `text`; returns the task id."""
        data = self._request(
            "POST",
            "v1/streaming.task",
            {"session_id": session_id, "text": text, "task_type": "talk", "task_mode": "sync"},
        )
        return (data.get("data") or {}).get("task_id")
