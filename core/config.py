"""
core/config.py
--------------
Process-wide configuration for the Sleft Signals backend and UI.

- One `Settings` object, read from the environment (and `.env` when present).
- Loaded once via `get_settings()` and handed to every collaborator explicitly.
- Field names follow the conventional environment variable names, e.g.
  SUPABASE_URL, SERPER_API_KEY, OPENAI_API_KEY, STRIPE_SECRET_KEY.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global settings for Sleft Signals."""

    # Service
    app_env: str = Field(default="development", description="Deployment environment name")
    log_level: str = Field(default="INFO", description="loguru level for the backend sink")
    backend_version: str = Field(default="1.0", description="Version reported by /health")
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Fallback origin for Stripe redirect URLs",
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:8501",
            "http://127.0.0.1:8501",
        ],
        description="Origins allowed by the CORS middleware",
    )

    # Supabase
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, description="Service-role key (preferred for backend writes)"
    )
    supabase_anon_key: Optional[str] = Field(default=None, description="Anon key fallback")

    # Serper (places / news / web search)
    serper_api_key: Optional[str] = Field(default=None, description="Serper.dev API key")
    serper_base_url: str = Field(default="https://google.serper.dev", description="Serper API root")
    search_timeout_seconds: float = Field(default=15.0, description="Per-call search timeout")

    # OpenAI
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o-mini", description="Model for chat + extraction")
    openai_onboarding_model: str = Field(default="gpt-4o", description="Model for onboarding greeting")

    # Stripe
    stripe_secret_key: Optional[str] = Field(default=None, description="Stripe secret key")
    stripe_price_id: str = Field(default="", description="Price for the Warm Introductions plan")
    stripe_webhook_secret: Optional[str] = Field(default=None, description="Webhook signing secret")

    # Airtable
    airtable_api_key: Optional[str] = Field(default=None, description="Airtable personal access token")
    airtable_base_id: Optional[str] = Field(default=None, description="Airtable base id")
    airtable_table_id: str = Field(default="Users", description="Table receiving registered users")
    airtable_leads_table: str = Field(default="Snapshot Leads", description="Table receiving snapshot leads")

    # HeyGen
    heygen_api_key: Optional[str] = Field(default=None, description="HeyGen API key")
    heygen_base_url: str = Field(default="https://api.heygen.com", description="HeyGen API root")

    # Conversation cache
    conversation_ttl_seconds: float = Field(
        default=3600.0, gt=0, description="Idle lifetime of a chat conversation"
    )
    conversation_sweep_interval_seconds: float = Field(
        default=300.0, gt=0, description="How often expired conversations are swept"
    )

    # Streamlit UI
    backend_url: str = Field(default="http://127.0.0.1:8000", description="Backend root used by the UI")
    ui_cache_ttl: int = Field(default=60, description="st.cache_data TTL for GET calls (seconds)")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def supabase_key(self) -> Optional[str]:
        """Service-role key when set, otherwise the anon key."""
        return self.supabase_service_role_key or self.supabase_anon_key

    @property
    def supabase_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def search_enabled(self) -> bool:
        return bool(self.serper_api_key)

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def stripe_enabled(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def airtable_enabled(self) -> bool:
        return bool(self.airtable_api_key and self.airtable_base_id)

    @property
    def heygen_enabled(self) -> bool:
        return bool(self.heygen_api_key)

    def integrations(self) -> dict:
        """Which external collaborators are configured (for status endpoints)."""
        return {
            "supabase": self.supabase_enabled,
            "serper": self.search_enabled,
            "openai": self.llm_enabled,
            "stripe": self.stripe_enabled,
            "airtable": self.airtable_enabled,
            "heygen": self.heygen_enabled,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
