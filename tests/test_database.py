from __future__ import annotations

import pytest
from postgrest.exceptions import APIError

from calendar_ai import database
from tests.conftest import make_query, make_supabase_client


def _api_error(code: str, details: str = "") -> APIError:
    return APIError({"message": f"error {code}", "code": code, "hint": None, "details": details})


def test_build_supabase_client_requires_url_and_key():
    assert database.build_supabase_client("", "key") is None
    assert database.build_supabase_client("https://x.supabase.co", "") is None


def test_get_user_not_found_is_none():
    query = make_query(error=_api_error("PGRST116"))
    assert database.get_user(make_supabase_client(query), "u1") is None
    query.eq.assert_called_with("id", "u1")
    query.single.assert_called_once()


def test_get_user_other_errors_propagate():
    query = make_query(error=_api_error("42501"))
    with pytest.raises(APIError):
        database.get_user(make_supabase_client(query), "u1")


def test_get_events_applies_bounds_and_order():
    query = make_query([{"id": "e1"}])
    client = make_supabase_client(query)

    rows = database.get_events(client, "u1", "2024-03-01T00:00:00", "2024-03-31T23:59:59")

    assert rows == [{"id": "e1"}]
    client.table.assert_called_with("events")
    query.eq.assert_called_with("user_id", "u1")
    query.order.assert_called_with("start_time", desc=False)
    query.gte.assert_called_with("start_time", "2024-03-01T00:00:00")
    query.lte.assert_called_with("end_time", "2024-03-31T23:59:59")


def test_get_events_without_bounds():
    query = make_query(None)
    assert database.get_events(make_supabase_client(query), "u1") == []
    query.gte.assert_not_called()
    query.lte.assert_not_called()


def test_create_event_returns_first_row():
    query = make_query([{"id": "e1", "title": "A"}])
    created = database.create_event(make_supabase_client(query), {"title": "A"})
    assert created == {"id": "e1", "title": "A"}
    query.insert.assert_called_with({"title": "A"})


def test_create_user_preferences_defaults():
    query = make_query([{"user_id": "u1"}])
    database.create_user_preferences(make_supabase_client(query), "u1", "Asia/Seoul")

    row = query.insert.call_args.args[0]
    assert row["timezone"] == "Asia/Seoul"
    assert row["default_meeting_duration"] == 30
    assert row["working_hours_start"] == "09:00"
    assert row["working_hours_end"] == "17:00"
    assert row["notification_preferences"] == {"email": True, "push": False}


def test_append_conversation_messages_extends_history():
    query = make_query({"id": "c1", "messages": [{"role": "user", "content": "hi"}]})
    client = make_supabase_client(query)

    database.append_conversation_messages(client, "c1", [{"role": "assistant", "content": "hello"}])

    update = query.update.call_args.args[0]
    assert [m["content"] for m in update["messages"]] == ["hi", "hello"]


def test_append_conversation_messages_missing_conversation():
    query = make_query(error=_api_error("PGRST116"))
    assert database.append_conversation_messages(make_supabase_client(query), "c1", []) is None
    query.update.assert_not_called()
