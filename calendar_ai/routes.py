from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response
from postgrest.exceptions import APIError

from . import database
from .agent import generate_scheduling_suggestions, handle_follow_up, parse_event_description
from .agent.schemas import RequestContext
from .colors import list_event_colors, suggest_event_color
from .config import API_BASE, DEFAULT_TIMEZONE
from .models import (
    AuthUser,
    ColorSuggestRequest,
    ConversationCreate,
    ConversationMessages,
    ConversationStatusUpdate,
    EventCreate,
    EventUpdate,
    FollowUpRequest,
    ParseEventRequest,
    PreferencesUpdate,
    SuggestionRequest,
)
from .user_sync import ensure_user_in_local_db
from .utils import _clean_optional_str, _log_debug, _now_iso_second

router = APIRouter(prefix=API_BASE)
logger = logging.getLogger(__name__)


def _openai_client(request: Request) -> Any:
  return getattr(request.app.state, "openai_client", None)


def require_store(request: Request) -> Any:
  client = getattr(request.app.state, "supabase_client", None)
  if client is None:
    raise HTTPException(status_code=503, detail="Supabase is not configured.")
  return client


def _store_call(label: str, fn: Callable[..., Any], *args: Any) -> Any:
  try:
    return fn(*args)
  except APIError as exc:
    logger.error("store %s failed: code=%s message=%s", label, exc.code, exc.message)
    raise HTTPException(status_code=502,
                        detail=f"Store {label} failed: {exc.message}") from exc


def _require_row(row: Optional[Dict[str, Any]], what: str) -> Dict[str, Any]:
  if row is None:
    raise HTTPException(status_code=404, detail=f"{what} not found.")
  return row


def _turns_to_rows(turns: List[Any]) -> List[Dict[str, Any]]:
  rows = []
  for turn in turns:
    row = turn.model_dump()
    if not row.get("timestamp"):
      row["timestamp"] = _now_iso_second()
    rows.append(row)
  return rows


# -------------------------
# AI
# -------------------------
@router.post("/calendar-ai")
async def calendar_ai(request: Request, payload: ParseEventRequest):
  text = _clean_optional_str(payload.input)
  if not text:
    raise HTTPException(status_code=400, detail="Input is required")

  context = payload.context or RequestContext(
      current_date=datetime.now().isoformat(timespec="seconds"),
      timezone=DEFAULT_TIMEZONE)
  try:
    result = await parse_event_description(_openai_client(request), text, context)
  except Exception as exc:
    logger.exception("calendar-ai request failed")
    raise HTTPException(status_code=500, detail="Internal server error") from exc
  _log_debug(f"[API] calendar-ai confidence={result.confidence}")
  return result.to_response()


@router.post("/calendar-ai/followup")
async def calendar_ai_follow_up(request: Request, payload: FollowUpRequest):
  result = await handle_follow_up(_openai_client(request), payload.response,
                                  payload.history, payload.event_data)
  return result.model_dump(by_alias=True)


@router.post("/calendar-ai/suggestions")
async def calendar_ai_suggestions(request: Request, payload: SuggestionRequest):
  suggestions = await generate_scheduling_suggestions(
      _openai_client(request),
      payload.event_details,
      payload.existing_events,
      payload.preferences.model_dump(by_alias=True),
  )
  return {"suggestions": suggestions}


@router.get("/colors")
def colors():
  return {"colors": list_event_colors()}


@router.post("/colors/suggest")
def colors_suggest(payload: ColorSuggestRequest):
  return {"color": suggest_event_color(payload.title, payload.description)}


# -------------------------
# Events
# -------------------------
@router.get("/users/{user_id}/events")
def list_user_events(request: Request,
                     user_id: str,
                     start_date: Optional[str] = Query(None),
                     end_date: Optional[str] = Query(None)):
  client = require_store(request)
  return _store_call("event list", database.get_events, client, user_id,
                     start_date, end_date)


@router.post("/users/{user_id}/events", status_code=201)
def create_user_event(request: Request, user_id: str, payload: EventCreate):
  client = require_store(request)
  row = payload.model_dump(exclude_none=True)
  row["user_id"] = user_id
  created = _store_call("event create", database.create_event, client, row)
  return _require_row(created, "Event")


@router.get("/events/{event_id}")
def get_event(request: Request, event_id: str):
  client = require_store(request)
  return _require_row(_store_call("event read", database.get_event, client, event_id),
                      "Event")


@router.patch("/events/{event_id}")
def patch_event(request: Request, event_id: str, payload: EventUpdate):
  client = require_store(request)
  updates = payload.model_dump(exclude_unset=True)
  if not updates:
    raise HTTPException(status_code=400, detail="No fields to update.")
  updated = _store_call("event update", database.update_event, client, event_id, updates)
  return _require_row(updated, "Event")


@router.delete("/events/{event_id}", status_code=204)
def delete_event(request: Request, event_id: str):
  client = require_store(request)
  _store_call("event delete", database.delete_event, client, event_id)
  return Response(status_code=204)


# -------------------------
# Preferences
# -------------------------
@router.get("/users/{user_id}/preferences")
def get_preferences(request: Request, user_id: str):
  client = require_store(request)
  prefs = _store_call("preferences read", database.get_user_preferences, client, user_id)
  return _require_row(prefs, "Preferences")


@router.put("/users/{user_id}/preferences")
def put_preferences(request: Request, user_id: str, payload: PreferencesUpdate):
  client = require_store(request)
  updates = payload.model_dump(exclude_none=True)
  existing = _store_call("preferences read", database.get_user_preferences, client,
                         user_id)
  if existing is None:
    _store_call("preferences create", database.create_user_preferences, client, user_id,
                updates.get("timezone") or DEFAULT_TIMEZONE)
  if not updates:
    return _require_row(
        _store_call("preferences read", database.get_user_preferences, client, user_id),
        "Preferences")
  updated = _store_call("preferences update", database.update_user_preferences, client,
                        user_id, updates)
  return _require_row(updated, "Preferences")


# -------------------------
# Users / conversations
# -------------------------
@router.post("/users/sync")
async def sync_user(request: Request, payload: AuthUser):
  client = require_store(request)
  result = await ensure_user_in_local_db(client, payload)
  return result.model_dump()


@router.post("/conversations", status_code=201)
def create_conversation(request: Request, payload: ConversationCreate):
  client = require_store(request)
  row = {
      "user_id": payload.user_id,
      "event_id": payload.event_id,
      "messages": _turns_to_rows(payload.messages),
      "context": payload.context or {},
  }
  created = _store_call("conversation create", database.create_conversation, client, row)
  return _require_row(created, "Conversation")


@router.post("/conversations/{conversation_id}/messages")
def append_messages(request: Request, conversation_id: str, payload: ConversationMessages):
  client = require_store(request)
  updated = _store_call("conversation append", database.append_conversation_messages,
                        client, conversation_id, _turns_to_rows(payload.messages))
  return _require_row(updated, "Conversation")


@router.patch("/conversations/{conversation_id}")
def update_conversation(request: Request, conversation_id: str,
                        payload: ConversationStatusUpdate):
  client = require_store(request)
  updated = _store_call("conversation update", database.set_conversation_status, client,
                        conversation_id, payload.status)
  return _require_row(updated, "Conversation")
