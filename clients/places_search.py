"""
clients/places_search.py
------------------------
Serper.dev client for places, news and web search.

Errors are raised (requests.HTTPError / RequestException / ValueError on bad
JSON); callers decide whether a failed search degrades to zero results.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from core.adjacency_map import get_search_term
from core.config import Settings


class PlacesSearchClient:
    """Thin wrapper over the Serper REST endpoints."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://google.serper.dev",
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("SERPER_API_KEY must be set to use places search")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "PlacesSearchClient":
        return cls(
            api_key=settings.serper_api_key or "",
            base_url=settings.serper_base_url,
            timeout=settings.search_timeout_seconds,
        )

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.session.post(
            f"{self.base_url}/{path}",
            json=payload,
            headers={"X-API-KEY": self.api_key, "Content-Type": "application/json"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    # ------------------------------------------------------------------ #
    # Places
    # ------------------------------------------------------------------ #

    def search_places(self, query: str, location: str, num: Optional[int] = None) -> List[Dict[str, Any]]:
        """Places matching ``"<query> near <location>"``."""
        payload: Dict[str, Any] = {
            "q": f"{query} near {location}",
            "location": location,
            "gl": "us",
            "hl": "en",
        }
        if num:
            payload["num"] = num
        data = self._post("places", payload)
        places = [
            {
                "title": place.get("title"),
                "address": place.get("address"),
                "rating": place.get("rating"),
                "ratingCount": place.get("ratingCount"),
                "phoneNumber": place.get("phoneNumber"),
                "website": place.get("website"),
                "category": place.get("category"),
                "cid": place.get("cid"),
            }
            for place in data.get("places") or []
            if place.get("title")
        ]
        logger.debug(f"[Serper] places '{query}' near '{location}' → {len(places)}")
        return places

    def search_specialty(self, specialty: str, location: str) -> List[Dict[str, Any]]:
        """Places for a specialty, using its search phrase."""
        return self.search_places(get_search_term(specialty), location)

    # ------------------------------------------------------------------ #
    # News / web
    # ------------------------------------------------------------------ #

    def search_news(self, query: str, num: int = 5) -> List[Dict[str, Any]]:
        data = self._post("news", {"q": query, "gl": "us", "hl": "en", "num": num})
        return [
            {
                "title": item.get("title"),
                "link": item.get("link"),
                "snippet": item.get("snippet"),
                "source": item.get("source"),
                "date": item.get("date"),
            }
            for item in data.get("news") or []
            if item.get("title")
        ]

    def search_web(self, query: str, num: int = 10) -> List[Dict[str, Any]]:
        data = self._post("search", {"q": query, "gl": "us", "hl": "en", "num": num})
        return [
            {
                "title": item.get("title"),
                "link": item.get("link"),
                "snippet": item.get("snippet"),
                "date": item.get("date"),
            }
            for item in data.get("organic") or []
            if item.get("title")
        ]
