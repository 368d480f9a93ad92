"""
Shared fixtures: app client with Supabase, auth, LLM and HTTP overrides.
"""
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.dependencies import get_http_client, get_supabase, get_supabase_admin
from app.core.security import CurrentUser, get_current_user
from app.middleware.rate_limit import limiter
from app.services.llm import get_optional_llm_client
from tests.fakes.fake_supabase import FakeSupabase

from main import app

BRANCH = {"id": "branch-lhr", "name": "Lahore", "city": "Lahore"}


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Every test starts with empty buckets"""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture(autouse=True)
def clear_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def fake_db():
    """In-memory Supabase seeded with one branch and two profiles"""
    return FakeSupabase({
        "branches": [dict(BRANCH), {"id": "branch-khi", "name": "Karachi", "city": "Karachi"}],
        "profiles": [
            {
                "id": "user-admin",
                "full_name": "Branch Manager",
                "role": "branch_admin",
                "branch_id": BRANCH["id"],
                "branch": dict(BRANCH),
            },
            {
                "id": "user-super",
                "full_name": "Owner",
                "role": "super_admin",
                "branch_id": None,
                "branch": None,
            },
        ],
    })


@pytest.fixture
def mock_llm():
    """LLM client whose generate_json result each test sets"""
    llm = MagicMock()
    llm.generate_json = AsyncMock()
    llm.generate_text = AsyncMock(return_value="")
    return llm


@pytest.fixture
def client(fake_db, mock_llm):
    """TestClient with backend and LLM swapped for fakes (no auth override)"""
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_supabase_admin] = lambda: fake_db
    app.dependency_overrides[get_optional_llm_client] = lambda: mock_llm
    return TestClient(app)


def _sign_in(fake_db, user_id):
    def _current_user():
        return CurrentUser(id=user_id, email=f"{user_id}@example.com", access_token="token", supabase=fake_db)
    app.dependency_overrides[get_current_user] = _current_user


@pytest.fixture
def branch_admin_client(client, fake_db):
    """Client signed in as the Lahore branch admin"""
    _sign_in(fake_db, "user-admin")
    return client


@pytest.fixture
def super_admin_client(client, fake_db):
    """Client signed in as a super admin without a branch"""
    _sign_in(fake_db, "user-super")
    return client


@pytest.fixture
def deepgram(monkeypatch):
    """
    Route Deepgram calls to a MockTransport.

    Set `deepgram.handler` to control responses; requests are recorded
    in `deepgram.requests`.
    """
    monkeypatch.setattr(settings, "deepgram_api_key", "dg-test-key")

    state = MagicMock()
    state.requests = []
    state.handler = lambda request: httpx.Response(200, json={})

    def transport_handler(request: httpx.Request) -> httpx.Response:
        state.requests.append(request)
        return state.handler(request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(transport_handler))
    app.dependency_overrides[get_http_client] = lambda: http_client
    state.http_client = http_client
    return state
