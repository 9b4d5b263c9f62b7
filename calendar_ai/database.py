from __future__ import annotations

from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client

from .config import (
    DEFAULT_MEETING_DURATION_MINUTES,
    DEFAULT_WORKING_HOURS_END,
    DEFAULT_WORKING_HOURS_START,
    SUPABASE_KEY,
    SUPABASE_URL,
)
from .utils import _log_debug

# PostgREST "no rows returned" for .single()
NOT_FOUND_CODE = "PGRST116"
UNIQUE_VIOLATION_CODE = "23505"


def build_supabase_client(url: str = SUPABASE_URL,
                          key: str = SUPABASE_KEY) -> Optional[Client]:
    if not url or not key:
        _log_debug("[STORE] SUPABASE_URL/SUPABASE_KEY not set; store disabled")
        return None
    return create_client(url, key)


def _single_or_none(query: Any) -> Optional[Dict[str, Any]]:
    try:
        response = query.single().execute()
    except APIError as exc:
        if exc.code == NOT_FOUND_CODE:
            return None
        raise
    return response.data


def _first_row(response: Any) -> Optional[Dict[str, Any]]:
    data = getattr(response, "data", None)
    if isinstance(data, list):
        return data[0] if data else None
    return data


# -------------------------
# users
# -------------------------
def get_user(client: Client, user_id: str) -> Optional[Dict[str, Any]]:
    return _single_or_none(client.table("users").select("*").eq("id", user_id))


def get_user_by_email(client: Client, email: str) -> Optional[Dict[str, Any]]:
    return _single_or_none(client.table("users").select("*").eq("email", email))


def create_user(client: Client, user: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return _first_row(client.table("users").insert(user).execute())


def update_user(client: Client, user_id: str,
                updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return _first_row(
        client.table("users").update(updates).eq("id", user_id).execute())


def update_user_by_email(client: Client, email: str,
                         updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return _first_row(
        client.table("users").update(updates).eq("email", email).execute())


# -------------------------
# events
# -------------------------
def get_events(client: Client,
               user_id: str,
               start_date: Optional[str] = None,
               end_date: Optional[str] = None) -> List[Dict[str, Any]]:
    query = (client.table("events")
             .select("*")
             .eq("user_id", user_id)
             .order("start_time", desc=False))
    if start_date:
        query = query.gte("start_time", start_date)
    if end_date:
        query = query.lte("end_time", end_date)
    response = query.execute()
    return list(response.data or [])


def get_event(client: Client, event_id: str) -> Optional[Dict[str, Any]]:
    return _single_or_none(client.table("events").select("*").eq("id", event_id))


def create_event(client: Client, event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return _first_row(client.table("events").insert(event).execute())


def update_event(client: Client, event_id: str,
                 updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return _first_row(
        client.table("events").update(updates).eq("id", event_id).execute())


def delete_event(client: Client, event_id: str) -> None:
    client.table("events").delete().eq("id", event_id).execute()


# -------------------------
# user_preferences
# -------------------------
def get_user_preferences(client: Client, user_id: str) -> Optional[Dict[str, Any]]:
    return _single_or_none(
        client.table("user_preferences").select("*").eq("user_id", user_id))


def create_user_preferences(client: Client, user_id: str,
                            timezone: str) -> Optional[Dict[str, Any]]:
    row = {
        "user_id": user_id,
        "timezone": timezone,
        "default_meeting_duration": DEFAULT_MEETING_DURATION_MINUTES,
        "working_hours_start": DEFAULT_WORKING_HOURS_START,
        "working_hours_end": DEFAULT_WORKING_HOURS_END,
        "notification_preferences": {
            "email": True,
            "push": False,
        },
    }
    return _first_row(client.table("user_preferences").insert(row).execute())


def update_user_preferences(client: Client, user_id: str,
                            updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return _first_row(
        client.table("user_preferences").update(updates).eq("user_id", user_id).execute())


# -------------------------
# ai_conversations
# -------------------------
def create_conversation(client: Client, conversation: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    row = dict(conversation)
    row.setdefault("status", "active")
    row.setdefault("messages", [])
    return _first_row(client.table("ai_conversations").insert(row).execute())


def get_conversation(client: Client, conversation_id: str) -> Optional[Dict[str, Any]]:
    return _single_or_none(
        client.table("ai_conversations").select("*").eq("id", conversation_id))


def append_conversation_messages(client: Client, conversation_id: str,
                                 messages: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Append turns to a conversation; returns None when it does not exist."""
    existing = get_conversation(client, conversation_id)
    if existing is None:
        return None
    history = list(existing.get("messages") or [])
    history.extend(messages)
    return _first_row(
        client.table("ai_conversations")
        .update({"messages": history})
        .eq("id", conversation_id)
        .execute())


def set_conversation_status(client: Client, conversation_id: str,
                            status: str) -> Optional[Dict[str, Any]]:
    return _first_row(
        client.table("ai_conversations")
        .update({"status": status})
        .eq("id", conversation_id)
        .execute())
