"""Pytest configuration and fixtures."""

import base64
import json
import os
import time
from collections.abc import Generator
from contextlib import ExitStack
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from tests.fakes import FakeSupabaseClient

TEST_SIGNING_SECRET = "boardroom-test-signing-secret-0123456789"
TEST_WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"boardroom-test-webhook-secret").decode()

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault(
    "IDENTITY_SIGNING_KEY_JWK",
    json.dumps(
        {
            "kty": "oct",
            "alg": "HS256",
            "k": base64.urlsafe_b64encode(TEST_SIGNING_SECRET.encode()).rstrip(b"=").decode(),
        }
    ),
)
os.environ.setdefault("IDENTITY_JWT_ALGORITHMS", "HS256")
os.environ.setdefault("IDENTITY_WEBHOOK_SECRET", TEST_WEBHOOK_SECRET)
os.environ.setdefault("RESEND_API_KEY", "re_test_key")

# Every module that binds get_supabase_client at import time
SUPABASE_CLIENT_TARGETS = [
    "src.core.supabase.get_supabase_client",
    "src.services.action_item_service.get_supabase_client",
    "src.services.agenda_service.get_supabase_client",
    "src.services.company_service.get_supabase_client",
    "src.services.custom_role_service.get_supabase_client",
    "src.services.decision_service.get_supabase_client",
    "src.services.document_service.get_supabase_client",
    "src.services.financial_report_service.get_supabase_client",
    "src.services.invitation_service.get_supabase_client",
    "src.services.meeting_service.get_supabase_client",
    "src.services.note_service.get_supabase_client",
    "src.services.okr_service.get_supabase_client",
    "src.services.org_role_service.get_supabase_client",
    "src.services.permission_service.get_supabase_client",
    "src.services.resolution_service.get_supabase_client",
    "src.services.user_service.get_supabase_client",
    "src.services.vote_service.get_supabase_client",
]

OWNER_ID = "user_owner"
ADMIN_ID = "user_admin"
BOARD_MEMBER_ID = "user_board"
OBSERVER_ID = "user_observer"
OUTSIDER_ID = "user_outsider"


def create_test_token(
    sub: str = OWNER_ID,
    email: str | None = "owner@example.com",
    sid: str | None = "sess_test",
    expires_in: int = 3600,
) -> str:
    """Create a test JWT signed with the test identity key."""
    now = int(time.time())
    payload: dict[str, Any] = {
        "sub": sub,
        "sid": sid,
        "exp": now + expires_in,
        "iat": now - 10,
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, TEST_SIGNING_SECRET, algorithm="HS256")


def auth_headers(sub: str = OWNER_ID, email: str | None = None) -> dict[str, str]:
    """Authorization header for a test user."""
    return {"Authorization": f"Bearer {create_test_token(sub, email or f'{sub}@example.com')}"}


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    # Clear the cache to ensure fresh settings
    get_settings.cache_clear()

    settings = get_settings()
    yield settings

    # Clean up cache after tests
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_caches() -> Generator[None, None, None]:
    """Drop cached settings, signing key and per-company init locks between tests."""
    from src.api.middleware.auth import get_signing_key
    from src.core.config import get_settings
    from src.services.permission_service import PermissionService

    get_settings.cache_clear()
    get_signing_key.cache_clear()
    PermissionService._init_locks.clear()
    PermissionService._initialized.clear()
    yield
    PermissionService._init_locks.clear()
    PermissionService._initialized.clear()


@pytest.fixture(autouse=True)
def mock_resend() -> Generator[MagicMock, None, None]:
    """Stub the Resend SDK so no test sends real email."""
    with patch("src.services.email_service.resend.Emails.send") as send:
        send.return_value = {"id": "email_test_123"}
        yield send


@pytest.fixture
def fake_db() -> Generator[FakeSupabaseClient, None, None]:
    """Provide an in-memory Supabase stand-in with the permission catalog loaded.

    Yields:
        FakeSupabaseClient: Fake client patched into every service module.
    """
    from src.services.permission_constants import catalog_rows

    client = FakeSupabaseClient()
    client.seed("permissions", *catalog_rows())

    with ExitStack() as stack:
        for target in SUPABASE_CLIENT_TARGETS:
            stack.enter_context(patch(target, return_value=client))
        yield client


@pytest.fixture
def board(fake_db: FakeSupabaseClient) -> dict[str, Any]:
    """Seed a company with one member per system role.

    Returns:
        dict: ``company`` row, ``members`` keyed by role name and ``users``
        keyed by user id.
    """
    users = {}
    for user_id in (OWNER_ID, ADMIN_ID, BOARD_MEMBER_ID, OBSERVER_ID, OUTSIDER_ID):
        users[user_id] = fake_db.seed(
            "users",
            {
                "id": user_id,
                "email": f"{user_id}@example.com",
                "first_name": user_id.split("_")[1].capitalize(),
                "last_name": "Test",
            },
        )[0]

    company = fake_db.seed("companies", {"name": "Acme Holdings"})[0]

    members = {}
    for role, user_id in (
        ("OWNER", OWNER_ID),
        ("ADMIN", ADMIN_ID),
        ("BOARD_MEMBER", BOARD_MEMBER_ID),
        ("OBSERVER", OBSERVER_ID),
    ):
        members[role] = fake_db.seed(
            "company_members",
            {
                "company_id": company["id"],
                "user_id": user_id,
                "role": role,
                "custom_role_id": None,
                "status": "ACTIVE",
                "joined_at": datetime.now(timezone.utc).isoformat(),
            },
        )[0]

    return {"company": company, "members": members, "users": users}


@pytest.fixture
def seed_meeting(fake_db: FakeSupabaseClient, board: dict[str, Any]):
    """Factory that seeds a meeting with every board member as attendee."""

    def _seed(status: str = "SCHEDULED", present: bool = False, **fields: Any) -> dict[str, Any]:
        meeting = fake_db.seed(
            "meetings",
            {
                "company_id": board["company"]["id"],
                "title": fields.pop("title", "Q3 Board Meeting"),
                "description": None,
                "scheduled_at": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
                "duration": 60,
                "location": None,
                "video_link": None,
                "status": status,
                "started_at": None,
                "ended_at": None,
                "notes": None,
                **fields,
            },
        )[0]
        for member in board["members"].values():
            fake_db.seed(
                "meeting_attendees",
                {"meeting_id": meeting["id"], "member_id": member["id"], "is_present": present},
            )
        return meeting

    return _seed


@pytest.fixture
def seed_decision(fake_db: FakeSupabaseClient):
    """Factory that seeds a decision on a meeting."""

    def _seed(meeting_id: str, title: str = "Approve budget", order: int = 0) -> dict[str, Any]:
        return fake_db.seed(
            "decisions",
            {
                "meeting_id": meeting_id,
                "agenda_item_id": None,
                "created_by_id": OWNER_ID,
                "title": title,
                "description": None,
                "outcome": None,
                "order": order,
            },
        )[0]

    return _seed


@pytest.fixture
def client(fake_db: FakeSupabaseClient) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Args:
        fake_db: In-memory storage fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
