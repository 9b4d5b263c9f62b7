from __future__ import annotations

from typing import Any, Dict, Optional

from ..colors import normalize_color
from ..errors import TimeFormatError
from ..utils import _clean_optional_str, _log_debug
from .normalizer import all_day_bounds, create_local_datetime, date_part, ensure_end_after_start


def _optional_bool(value: Any) -> Optional[bool]:
  if isinstance(value, bool):
    return value
  if isinstance(value, str):
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "1"):
      return True
    if lowered in ("false", "no", "0"):
      return False
  return None


def _local_or_none(date_value: Optional[str], time_value: Any,
                   timezone_name: str) -> Optional[str]:
  if not date_value or not isinstance(time_value, str) or not time_value.strip():
    return None
  try:
    return create_local_datetime(date_value, time_value, timezone_name)
  except TimeFormatError as exc:
    _log_debug(f"[EVENT FIELDS] dropped time: {exc}")
    return None


def extract_event_fields(item: Dict[str, Any],
                         timezone_name: str,
                         fallback_date: Optional[str] = None) -> Dict[str, Any]:
  """
    Model event object -> canonical field map.

    Keys the model did not supply (or supplied empty) come back as None so
    the reconciler can tell "not mentioned" from "mentioned".
    """
  start_raw = item.get("startTime")
  end_raw = item.get("endTime")
  is_all_day = _optional_bool(item.get("isAllDay"))

  start_date = (_clean_optional_str(item.get("startDate"))
                or date_part(start_raw)
                or fallback_date)
  end_date = (_clean_optional_str(item.get("endDate"))
              or date_part(end_raw)
              or start_date)

  start_iso = _local_or_none(start_date, start_raw, timezone_name)
  end_iso = _local_or_none(end_date, end_raw, timezone_name)

  if is_all_day and start_iso is None and end_iso is None and start_date:
    try:
      start_iso, end_iso = all_day_bounds(start_date)
    except TimeFormatError as exc:
      _log_debug(f"[EVENT FIELDS] dropped all-day bounds: {exc}")

  return {
      "title": _clean_optional_str(item.get("title")),
      "start_time": start_iso,
      "end_time": ensure_end_after_start(start_iso, end_iso),
      "location": _clean_optional_str(item.get("location")),
      "description": _clean_optional_str(item.get("description")),
      "color": normalize_color(item.get("color")),
      "is_all_day": is_all_day,
      "confidence": item.get("confidence"),
  }
