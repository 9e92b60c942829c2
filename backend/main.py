"""
Sleft Signals Backend API
=========================

FastAPI service behind the Sleft referral-partner platform.

Feature Map & Design Intent
---------------------------
• Referral snapshots
    - Adjacency map: which specialties send patients to which.
    - Fit-scored referral sources aggregated from places search
      (Serper when configured, synthetic demo places otherwise).
    - Shareable brief ids that re-derive the same brief inputs.

• Strategy briefs
    - Partner leads, local news and networking events rendered into one
      markdown brief and stored per user in Supabase (soft delete).

• Conversations
    - Discovery and onboarding chats keep per-user state in
      ConversationStore instances; a background task sweeps idle entries.

• Provider network
    - Profiles, community feed, vendor reviews, partner discovery and a
      curated market-intelligence feed. Posting and reviewing require an
      active or trial subscription (Stripe).

• Integrations
    - OpenAI, Serper, Stripe, Supabase, Airtable and HeyGen are all optional
      at boot. Each endpoint reports clearly when its collaborator is missing.

Every router is mounted under `/api`; `/`, `/health` and `/status/summary`
stay at the root for probes and the Streamlit sidebar.
"""

from __future__ import annotations

import asyncio
import os
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from supabase import Client

# --------------------------------------------------------------------------- #
# Path setup: ensure project root on sys.path
# --------------------------------------------------------------------------- #

# Allows imports like `core.*`, `analytics.*`, `clients.*` when running via uvicorn
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

from backend.dependencies import get_optional_supabase, settings_dep
from backend.routes.accounts import router as accounts_router
from backend.routes.billing import router as billing_router
from backend.routes.briefs import router as briefs_router
from backend.routes.chat import router as chat_router
from backend.routes.heygen import router as heygen_router
from backend.routes.network import router as network_router
from backend.routes.referrals import router as referrals_router
from core.config import Settings, get_settings
from core.conversation_store import ConversationStore
from core.health import system_health
from core.logging_setup import configure_logging
from core.metadata import get_metadata

settings = get_settings()
configure_logging(settings.log_level)

ROUTERS = {
    "referrals": referrals_router,
    "briefs": briefs_router,
    "chat": chat_router,
    "network": network_router,
    "billing": billing_router,
    "accounts": accounts_router,
    "heygen": heygen_router,
}

# --------------------------------------------------------------------------- #
# Conversation cache sweeper
# --------------------------------------------------------------------------- #

async def sweep_conversations(stores: list, interval: float) -> None:
    """Drop expired conversations every `interval` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        for store in stores:
            dropped = store.sweep()
            if dropped:
                logger.info(f"[Conversations] 🧹 Swept {dropped} idle entr{'y' if dropped == 1 else 'ies'} from {store.name}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    stores = [app.state.discovery_store, app.state.onboarding_store]
    task = asyncio.create_task(
        sweep_conversations(stores, settings.conversation_sweep_interval_seconds)
    )
    app.state.conversation_sweeper = task
    logger.info(f"[Backend] ✅ Sleft Signals API up; integrations: {settings.integrations()}")
    try:
        yield
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("[Backend] Conversation sweeper stopped.")


# --------------------------------------------------------------------------- #
# FastAPI App
# --------------------------------------------------------------------------- #

app = FastAPI(
    title="Sleft Signals Backend API",
    version=settings.backend_version,
    description=(
        "Backend for the Sleft referral-partner platform.\n"
        "- Adjacency map + fit-scored referral sources.\n"
        "- Strategy briefs, discovery and onboarding chats.\n"
        "- Provider network, vendor reviews, market intelligence.\n"
        "- Thin proxies to OpenAI, Serper, Stripe, Supabase, Airtable, HeyGen."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.discovery_store = ConversationStore(
    ttl_seconds=settings.conversation_ttl_seconds, name="discovery"
)
app.state.onboarding_store = ConversationStore(
    ttl_seconds=settings.conversation_ttl_seconds, name="onboarding"
)

for name, router in ROUTERS.items():
    app.include_router(router, prefix="/api")
    logger.debug(f"[Backend] Registered {name} router under /api")


# --------------------------------------------------------------------------- #
# Core Routes
# --------------------------------------------------------------------------- #

@app.get("/")
def root(settings: Settings = Depends(settings_dep)) -> Dict[str, Any]:
    """
    Basic liveness probe.
    """
    return {
        "status": "ok",
        "message": "Sleft Signals Backend is live.",
        "version": app.version,
        "environment": settings.app_env,
        "metadata": get_metadata(),
        "integrations": settings.integrations(),
    }


@app.get("/health")
def health(
    settings: Settings = Depends(settings_dep),
    sb: Optional[Client] = Depends(get_optional_supabase),
) -> Dict[str, Any]:
    """
    System health endpoint.

    Delegates to core.health.system_health which:
    - Pings Supabase (when configured)
    - Reports runtime and process metrics
    - Returns a stable, machine-readable payload
    """
    return system_health(settings, sb)


@app.get("/status/summary")
def status_summary(settings: Settings = Depends(settings_dep)) -> Dict[str, Any]:
    """
    High-level status summary for dashboards & agents.
    """
    return {
        "backend_version": app.version,
        "integrations": settings.integrations(),
        "routers": sorted(ROUTERS),
        "conversations": {
            "discovery": len(app.state.discovery_store),
            "onboarding": len(app.state.onboarding_store),
        },
    }


# --------------------------------------------------------------------------- #
# End of File
# --------------------------------------------------------------------------- #
