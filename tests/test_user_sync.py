from __future__ import annotations

import time
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from calendar_ai import database
from calendar_ai.models import AuthUser
from calendar_ai.user_sync import _display_name, ensure_user_in_local_db


def _auth_user(**overrides) -> AuthUser:
    payload = {
        "id": "auth-1",
        "email": "sam@example.com",
        "email_confirmed_at": "2024-03-01T00:00:00Z",
        "user_metadata": {"full_name": "Sam Lee", "sub": "google-123",
                          "avatar_url": "https://img.example.com/sam.png"},
        "app_metadata": {"provider": "google"},
    }
    payload.update(overrides)
    return AuthUser.model_validate(payload)


@pytest.fixture
def store(monkeypatch):
    fake = MagicMock()
    fake.get_user.return_value = None
    fake.get_user_by_email.return_value = None
    for name in ("get_user", "get_user_by_email", "create_user", "update_user_by_email"):
        monkeypatch.setattr(database, name, getattr(fake, name))
    return fake


@pytest.mark.asyncio
async def test_existing_user(store):
    store.get_user.return_value = {"id": "auth-1"}

    result = await ensure_user_in_local_db(object(), _auth_user())

    assert result.ok and result.action == "exists"
    store.create_user.assert_not_called()


@pytest.mark.asyncio
async def test_creates_missing_user(store):
    result = await ensure_user_in_local_db(object(), _auth_user())

    assert result.ok and result.action == "created"
    row = store.create_user.call_args.args[1]
    assert row["id"] == "auth-1"
    assert row["avatar"] == "https://img.example.com/sam.png"
    assert "avatar_url" not in row
    assert row["name"] == "Sam Lee"
    assert row["provider"] == "google"
    assert row["provider_id"] == "google-123"
    assert row["email_verified"] is True


@pytest.mark.asyncio
async def test_relinks_by_email(store):
    store.get_user_by_email.return_value = {"id": "old-id", "email": "sam@example.com"}

    result = await ensure_user_in_local_db(object(), _auth_user())

    assert result.ok and result.action == "relinked"
    email, updates = store.update_user_by_email.call_args.args[1:]
    assert email == "sam@example.com"
    assert updates["id"] == "auth-1"
    store.create_user.assert_not_called()


@pytest.mark.asyncio
async def test_duplicate_email_on_insert_relinks(store):
    store.create_user.side_effect = APIError({
        "message": "duplicate key value violates unique constraint",
        "code": "23505",
        "hint": None,
        "details": "Key (email)=(sam@example.com) already exists.",
    })

    result = await ensure_user_in_local_db(object(), _auth_user())

    assert result.ok and result.action == "relinked"


@pytest.mark.asyncio
async def test_other_insert_errors_are_reported(store):
    store.create_user.side_effect = APIError({
        "message": "permission denied", "code": "42501", "hint": None, "details": None,
    })

    result = await ensure_user_in_local_db(object(), _auth_user())

    assert not result.ok
    assert "permission denied" in result.error


@pytest.mark.asyncio
async def test_timeout_is_not_fatal(store):
    store.get_user.side_effect = lambda *_: time.sleep(0.5)

    result = await ensure_user_in_local_db(object(), _auth_user(), timeout=0.05)

    assert not result.ok
    assert result.error == "user sync timed out"


@pytest.mark.asyncio
async def test_without_store_is_skipped():
    result = await ensure_user_in_local_db(None, _auth_user())
    assert not result.ok and result.action == "skipped"


def test_display_name_fallbacks():
    assert _display_name(_auth_user(user_metadata={"name": "Sam"})) == "Sam"
    assert _display_name(_auth_user(user_metadata={})) == "sam"
    assert _display_name(_auth_user(user_metadata={}, email=None)) == "User"


@pytest.mark.asyncio
async def test_provider_defaults_to_credentials(store):
    await ensure_user_in_local_db(object(), _auth_user(app_metadata={}, user_metadata={}))

    row = store.create_user.call_args.args[1]
    assert row["provider"] == "credentials"
    assert row["provider_id"] == "auth-1"
    assert row["avatar"] is None
