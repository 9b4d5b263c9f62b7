from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from postgrest.exceptions import APIError

from . import database
from .config import USER_SYNC_TIMEOUT_SECONDS
from .errors import SyncError
from .models import AuthUser, SyncResult

logger = logging.getLogger(__name__)


def _display_name(auth_user: AuthUser) -> str:
    meta = auth_user.user_metadata or {}
    for key in ("full_name", "name"):
        value = meta.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    if auth_user.email and "@" in auth_user.email:
        return auth_user.email.split("@", 1)[0]
    return "User"


def _user_row(auth_user: AuthUser) -> Dict[str, Any]:
    meta = auth_user.user_metadata or {}
    return {
        "id": auth_user.id,
        "email": auth_user.email,
        "name": _display_name(auth_user),
        "avatar": meta.get("avatar_url") or meta.get("picture"),
        "provider": (auth_user.app_metadata or {}).get("provider") or "credentials",
        "provider_id": meta.get("sub") or auth_user.id,
        "email_verified": bool(auth_user.email_confirmed_at),
    }


def _is_email_conflict(exc: APIError) -> bool:
    if exc.code != database.UNIQUE_VIOLATION_CODE:
        return False
    text = f"{exc.details or ''} {exc.message or ''}".lower()
    return "email" in text


def _sync_blocking(client: Any, auth_user: AuthUser) -> str:
    if database.get_user(client, auth_user.id) is not None:
        return "exists"

    row = _user_row(auth_user)
    if auth_user.email and database.get_user_by_email(client, auth_user.email) is not None:
        return _relink(client, auth_user.email, row)

    try:
        database.create_user(client, row)
        return "created"
    except APIError as exc:
        if not _is_email_conflict(exc) or not auth_user.email:
            raise SyncError(f"user insert failed: {exc.message}", code=exc.code) from exc
    # insert raced with another sign-in for the same email
    return _relink(client, auth_user.email, row)


def _relink(client: Any, email: str, row: Dict[str, Any]) -> str:
    # 같은 이메일의 기존 row를 새 auth id로 재연결
    updates = {key: value for key, value in row.items() if key != "email"}
    try:
        database.update_user_by_email(client, email, updates)
    except APIError as exc:
        raise SyncError(f"user relink failed: {exc.message}", code=exc.code) from exc
    return "relinked"


async def ensure_user_in_local_db(client: Optional[Any],
                                  auth_user: AuthUser,
                                  timeout: float = USER_SYNC_TIMEOUT_SECONDS) -> SyncResult:
    """Make sure the authenticated user has a row in the users table.

    Never raises: every failure, including a timeout, is reported in the result
    so sign-in can proceed.
    """
    if client is None:
        return SyncResult(ok=False, action="skipped", error="store is not configured")

    try:
        action = await asyncio.wait_for(
            asyncio.to_thread(_sync_blocking, client, auth_user), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("user sync timed out after %ss for %s", timeout, auth_user.id)
        return SyncResult(ok=False, action="skipped", error="user sync timed out")
    except SyncError as exc:
        logger.error("user sync failed for %s: %s (code=%s)", auth_user.id, exc, exc.code)
        return SyncResult(ok=False, action="skipped", error=str(exc))
    except APIError as exc:
        logger.error("user lookup failed for %s: %s", auth_user.id, exc.message)
        return SyncResult(ok=False, action="skipped", error=str(exc.message))
    except Exception as exc:
        logger.exception("unexpected user sync error for %s", auth_user.id)
        return SyncResult(ok=False, action="skipped", error=str(exc))

    logger.info("user sync %s for %s", action, auth_user.id)
    return SyncResult(ok=True, action=action)
