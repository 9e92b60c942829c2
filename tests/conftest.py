"""Pytest configuration and shared fixtures.

Ensure the project root is on sys.path so tests can import `core`, `analytics`,
`backend` etc. when pytest is invoked from the repository root, and provide an
API client whose collaborators are all in-memory doubles.
"""

import random
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
TESTS = Path(__file__).resolve().parent
if str(TESTS) not in sys.path:
    sys.path.insert(0, str(TESTS))

from fastapi.testclient import TestClient  # noqa: E402

from fakes import FakeSupabase  # noqa: E402


@pytest.fixture
def settings():
    """Settings with no external integrations configured."""
    from core.config import Settings

    return Settings(_env_file=None, supabase_url=None, supabase_service_role_key=None, supabase_anon_key=None)


@pytest.fixture
def sb():
    return FakeSupabase()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def places():
    """Places-search double; every method returns [] unless a test says otherwise."""
    mock = MagicMock()
    mock.search_places.return_value = []
    mock.search_specialty.return_value = []
    mock.search_news.return_value = []
    mock.search_web.return_value = []
    return mock


@pytest.fixture
def llm():
    mock = MagicMock()
    mock.complete = AsyncMock(return_value="Sounds good.")
    return mock


@pytest.fixture
def overrides(settings, sb, rng):
    """Dependency overrides in force for the `client` fixture; tests may add to it."""
    from backend import dependencies as deps

    return {
        deps.settings_dep: lambda: settings,
        deps.get_optional_supabase: lambda: sb,
        deps.get_places_client: lambda: None,
        deps.get_llm_client: lambda: None,
        deps.get_airtable: lambda: None,
        deps.get_billing: lambda: None,
        deps.get_rng: lambda: rng,
    }


@pytest.fixture
def client(overrides):
    from backend.main import app
    from core.conversation_store import ConversationStore

    app.state.discovery_store = ConversationStore(ttl_seconds=60, name="discovery")
    app.state.onboarding_store = ConversationStore(ttl_seconds=60, name="onboarding")
    app.dependency_overrides.update(overrides)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
