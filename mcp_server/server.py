from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests
from mcp.server.fastmcp import FastMCP

BACKEND_BASE_URL = os.getenv("BACKEND_BASE_URL", "http://localhost:8000").rstrip("/")
BACKEND_API_BASE = os.getenv("BACKEND_API_BASE", "/api").rstrip("/")
DEFAULT_USER_ID = os.getenv("CALENDAR_USER_ID", "").strip()
REQUEST_TIMEOUT = float(os.getenv("MCP_BACKEND_TIMEOUT", "15"))
DEBUG_MODE = os.getenv("MCP_DEBUG", "1").strip() in ("1", "true", "True", "yes")
LOG_REQUESTS = os.getenv("MCP_LOG_REQUESTS", "0").strip() in ("1", "true", "True", "yes")

mcp = FastMCP("calendar-ai")

# update_event가 백엔드로 전달하는 필드
UPDATABLE_FIELDS = (
    "title",
    "start_time",
    "end_time",
    "description",
    "location",
    "color",
    "confidence",
    "is_all_day",
    "status",
)


def _log_tool_call(tool_name: str, input_data: Dict[str, Any], output_data: Dict[str, Any]) -> None:
  """도구 호출 입출력을 터미널에 출력"""
  if not DEBUG_MODE:
    return
  print(f"\n{'='*80}")
  print(f"🔧 Tool: {tool_name}")
  print(f"{'='*80}")
  print("📥 입력:")
  print(json.dumps(input_data, indent=2, ensure_ascii=False, default=str))
  print("\n📤 출력:")
  print(json.dumps(output_data, indent=2, ensure_ascii=False, default=str))
  print(f"{'='*80}\n")


class RequestLoggerMiddleware:
  def __init__(self, app: Any):
    self.app = app

  async def __call__(self, scope: Dict[str, Any], receive: Any, send: Any) -> None:
    if scope.get("type") != "http":
      await self.app(scope, receive, send)
      return

    headers = self._decode_headers(scope.get("headers") or [])
    self._log_request(scope.get("method", ""), scope.get("path", ""), headers)
    await self.app(scope, receive, send)

  def _decode_headers(self, raw_headers: List[Tuple[bytes, bytes]]) -> Dict[str, str]:
    return {
        key.decode("latin-1").lower(): value.decode("latin-1")
        for key, value in raw_headers
    }

  def _log_request(self, method: str, path: str, headers: Dict[str, str]) -> None:
    if not LOG_REQUESTS:
      return
    safe_headers = dict(headers)
    for secret in ("authorization", "cookie"):
      if secret in safe_headers:
        safe_headers[secret] = "(redacted)"

    print("\n" + "=" * 80)
    print("📡 MCP HTTP Request")
    print("=" * 80)
    print(f"method: {method}")
    print(f"path: {path}")
    print("headers:")
    print(json.dumps(safe_headers, indent=2, ensure_ascii=False))
    print("=" * 80 + "\n")


def _api_path(path: str) -> str:
  return f"{BACKEND_API_BASE}/{path.lstrip('/')}"


def _resolve_user_id(user_id: Optional[str]) -> Optional[str]:
  uid = (user_id or DEFAULT_USER_ID).strip()
  return uid or None


def _invalid(message: str) -> Dict[str, Any]:
  return {"ok": False, "code": "invalid_request", "message": message}


def _request(method: str,
             path: str,
             params: Optional[Dict[str, Any]] = None,
             payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
  url = f"{BACKEND_BASE_URL}{path}"
  try:
    resp = requests.request(method,
                            url,
                            params=params,
                            json=payload,
                            timeout=REQUEST_TIMEOUT)
  except requests.RequestException as exc:
    return {
        "ok": False,
        "code": "request_failed",
        "message": f"Backend request failed: {exc}",
    }

  if resp.status_code == 204:
    return {"ok": True, "data": None}

  try:
    data = resp.json()
  except ValueError:
    data = {"raw": resp.text}

  if resp.status_code >= 400:
    return {
        "ok": False,
        "code": "backend_error",
        "status": resp.status_code,
        "error": data,
    }

  return {"ok": True, "data": data}


@mcp.tool(name="calendar.parse_event")
def calendar_parse_event(
    text: str,
    context: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
  """Turn a natural-language description into one or more event drafts."""
  input_data = {"text": text, "context": context}
  if not (text or "").strip():
    result = _invalid("text is required.")
    _log_tool_call("calendar.parse_event", input_data, result)
    return result

  payload: Dict[str, Any] = {"input": text}
  if context:
    payload["context"] = context
  result = _request("POST", _api_path("/calendar-ai"), payload=payload)
  _log_tool_call("calendar.parse_event", input_data, result)
  return result


@mcp.tool(name="calendar.list_events")
def calendar_list_events(
    user_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Dict[str, Any]:
  input_data = {"user_id": user_id, "start_date": start_date, "end_date": end_date}
  uid = _resolve_user_id(user_id)
  if not uid:
    result = _invalid("user_id is required. Pass user_id or set CALENDAR_USER_ID.")
    _log_tool_call("calendar.list_events", input_data, result)
    return result

  params = {k: v for k, v in (("start_date", start_date), ("end_date", end_date)) if v}
  result = _request("GET",
                    _api_path(f"/users/{quote(uid, safe='')}/events"),
                    params=params or None)
  _log_tool_call("calendar.list_events", input_data, result)
  return result


@mcp.tool(name="calendar.create_event")
def calendar_create_event(
    items: List[Dict[str, Any]],
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
  """Store event drafts (e.g. from calendar.parse_event) for a user."""
  input_data = {"items": items, "user_id": user_id}
  uid = _resolve_user_id(user_id)
  if not uid:
    result = _invalid("user_id is required. Pass user_id or set CALENDAR_USER_ID.")
    _log_tool_call("calendar.create_event", input_data, result)
    return result
  if not isinstance(items, list) or not items:
    result = _invalid("items is required and must be a non-empty array.")
    _log_tool_call("calendar.create_event", input_data, result)
    return result

  results: List[Dict[str, Any]] = []
  path = _api_path(f"/users/{quote(uid, safe='')}/events")
  for item in items:
    if not isinstance(item, dict):
      results.append({**_invalid("each item must be an object."), "item": item})
      continue
    results.append(_request("POST", path, payload=_draft_to_row(item)))
  result = {"ok": all(r.get("ok") for r in results), "data": results}
  _log_tool_call("calendar.create_event", input_data, result)
  return result


def _draft_to_row(item: Dict[str, Any]) -> Dict[str, Any]:
  # parse_event 결과(camelCase)와 저장 row(snake_case) 모두 허용
  row = {
      "title": item.get("title"),
      "start_time": item.get("start_time") or item.get("startTime"),
      "end_time": item.get("end_time") or item.get("endTime"),
      "description": item.get("description"),
      "location": item.get("location"),
      "color": item.get("color"),
      "confidence": item.get("confidence"),
      "is_all_day": item.get("is_all_day", item.get("isAllDay")),
      "original_input": item.get("original_input") or item.get("originalInput"),
  }
  return {k: v for k, v in row.items() if v is not None}


@mcp.tool(name="calendar.update_event")
def calendar_update_event(
    event_id: str,
    changes: Dict[str, Any],
) -> Dict[str, Any]:
  input_data = {"event_id": event_id, "changes": changes}
  if not event_id:
    result = _invalid("event_id is required.")
    _log_tool_call("calendar.update_event", input_data, result)
    return result

  payload = {k: v for k, v in (changes or {}).items() if k in UPDATABLE_FIELDS}
  if not payload:
    result = _invalid("changes must contain at least one updatable field.")
    _log_tool_call("calendar.update_event", input_data, result)
    return result

  result = _request("PATCH",
                    _api_path(f"/events/{quote(str(event_id), safe='')}"),
                    payload=payload)
  _log_tool_call("calendar.update_event", input_data, result)
  return result


@mcp.tool(name="calendar.delete_event")
def calendar_delete_event(event_id: str) -> Dict[str, Any]:
  input_data = {"event_id": event_id}
  if not event_id:
    result = _invalid("event_id is required.")
    _log_tool_call("calendar.delete_event", input_data, result)
    return result

  result = _request("DELETE", _api_path(f"/events/{quote(str(event_id), safe='')}"))
  _log_tool_call("calendar.delete_event", input_data, result)
  return result


@mcp.tool(name="calendar.suggest_times")
def calendar_suggest_times(
    event_details: Dict[str, Any],
    existing_events: Optional[List[Dict[str, Any]]] = None,
    preferences: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
  input_data = {
      "event_details": event_details,
      "existing_events": existing_events,
      "preferences": preferences,
  }
  payload: Dict[str, Any] = {
      "eventDetails": event_details or {},
      "existingEvents": existing_events or [],
  }
  if preferences:
    payload["preferences"] = preferences
  result = _request("POST", _api_path("/calendar-ai/suggestions"), payload=payload)
  _log_tool_call("calendar.suggest_times", input_data, result)
  return result


if __name__ == "__main__":
  import uvicorn

  host = os.getenv("MCP_HOST", "0.0.0.0")
  port = int(os.getenv("MCP_PORT", "8001"))
  app = mcp.streamable_http_app()
  if LOG_REQUESTS:
    app = RequestLoggerMiddleware(app)
  uvicorn.run(app, host=host, port=port)
