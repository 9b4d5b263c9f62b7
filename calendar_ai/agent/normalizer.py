from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Tuple
import re
from zoneinfo import ZoneInfo

from ..config import DEFAULT_EVENT_DURATION_MINUTES, DEFAULT_TIMEZONE
from ..errors import TimeFormatError
from ..utils import _log_debug

LOCAL_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

_CLOCK_RE = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?(?::\d{2})?\s*(?P<meridiem>[ap]\.?\s*m\.?)?$",
    re.IGNORECASE,
)
_NAMED_TIMES = {
    "noon": (12, 0),
    "midday": (12, 0),
    "midnight": (0, 0),
}


def normalize_input_as_text(value: Optional[str]) -> str:
  if not isinstance(value, str):
    return ""
  return value.strip()


def resolve_timezone(requested_timezone: Optional[str],
                     preferences: Optional[Dict[str, Any]] = None) -> str:
  pref_timezone = None
  if isinstance(preferences, dict):
    pref_timezone = preferences.get("timezone")

  for candidate in (requested_timezone, pref_timezone, DEFAULT_TIMEZONE):
    if not isinstance(candidate, str):
      continue
    cleaned = candidate.strip()
    if not cleaned:
      continue
    try:
      ZoneInfo(cleaned)
      return cleaned
    except Exception:
      continue
  return "UTC"


def try_parse_date(value: Any) -> Optional[date]:
  if not isinstance(value, str):
    return None
  cleaned = value.strip()
  if not cleaned:
    return None
  # Strip time portion if present (e.g. "2026-02-01T00:00:00Z" -> "2026-02-01")
  if "T" in cleaned:
    cleaned = cleaned.split("T")[0]
  elif " " in cleaned:
    cleaned = cleaned.split(" ")[0]
  try:
    return datetime.strptime(cleaned, "%Y-%m-%d").date()
  except ValueError:
    return None


def date_part(value: Any) -> Optional[str]:
  parsed = try_parse_date(value)
  return parsed.isoformat() if parsed else None


def parse_clock_time(value: Any) -> Tuple[int, int]:
  """
    "7:00 AM", "7pm", "19:00", "noon" -> (hour, minute) on a 24-hour clock.
    """
  if not isinstance(value, str) or not value.strip():
    raise TimeFormatError("Time value is empty.", value=value if isinstance(value, str) else None)
  raw = value.strip()
  # Models sometimes answer with a full local timestamp instead of a clock time.
  if "T" in raw:
    raw = raw.split("T", 1)[1]
    raw = re.sub(r"(Z|[+-]\d{2}:?\d{2})$", "", raw)
  lowered = raw.lower()
  if lowered in _NAMED_TIMES:
    return _NAMED_TIMES[lowered]

  match = _CLOCK_RE.match(raw)
  if not match:
    raise TimeFormatError(f"Unrecognized time: {value!r}", value=value)

  hour = int(match.group("hour"))
  minute = int(match.group("minute") or 0)
  meridiem = match.group("meridiem")
  if minute > 59:
    raise TimeFormatError(f"Minute out of range: {value!r}", value=value)

  if meridiem:
    if hour < 1 or hour > 12:
      raise TimeFormatError(f"Hour out of range for 12-hour clock: {value!r}", value=value)
    is_pm = meridiem.lower().startswith("p")
    if is_pm and hour != 12:
      hour += 12
    elif not is_pm and hour == 12:
      hour = 0
  elif hour > 23:
    raise TimeFormatError(f"Hour out of range: {value!r}", value=value)
  return hour, minute


def create_local_datetime(date_str: str, time_str: str, timezone_name: str) -> str:
  """
    Date + human clock time -> "YYYY-MM-DDTHH:MM:00" with no offset.

    The timezone is not applied: the value is a wall-clock time in the
    user's zone. A malformed time degrades to local midnight of the date;
    an unparseable date raises TimeFormatError.
    """
  _ = timezone_name
  day = try_parse_date(date_str)
  if day is None:
    raise TimeFormatError(f"Unrecognized date: {date_str!r}", value=date_str)
  try:
    hour, minute = parse_clock_time(time_str)
  except TimeFormatError as exc:
    _log_debug(f"[NORMALIZER] {exc} -> midnight fallback for {day.isoformat()}")
    return f"{day.isoformat()}T00:00:00"
  return f"{day.isoformat()}T{hour:02d}:{minute:02d}:00"


def all_day_bounds(date_str: str) -> Tuple[str, str]:
  day = try_parse_date(date_str)
  if day is None:
    raise TimeFormatError(f"Unrecognized date: {date_str!r}", value=date_str)
  next_day = day + timedelta(days=1)
  return f"{day.isoformat()}T00:00:00", f"{next_day.isoformat()}T00:00:00"


def parse_local_datetime(value: Any) -> Optional[datetime]:
  """Wall-clock datetime from a stored or normalized timestamp; any offset is dropped."""
  if not isinstance(value, str) or not value.strip():
    return None
  raw = value.strip()
  try:
    return datetime.strptime(raw, LOCAL_DATETIME_FORMAT)
  except ValueError:
    pass
  try:
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
  except ValueError:
    return None
  return parsed.replace(tzinfo=None)


def ensure_end_after_start(start_iso: Optional[str],
                           end_iso: Optional[str]) -> Optional[str]:
  if not start_iso or not end_iso:
    return end_iso
  start = parse_local_datetime(start_iso)
  end = parse_local_datetime(end_iso)
  if start is None or end is None:
    return end_iso
  if end > start:
    return end_iso
  if end.date() == start.date() and end.time() < start.time():
    # 자정을 넘기는 일정
    end = end + timedelta(days=1)
  else:
    end = start + timedelta(minutes=DEFAULT_EVENT_DURATION_MINUTES)
  return end.strftime(LOCAL_DATETIME_FORMAT)


def shift_end_preserving_duration(new_start_iso: str,
                                  original_start_iso: Optional[str],
                                  original_end_iso: Optional[str]) -> Optional[str]:
  """End time for a moved event that keeps the original event's length."""
  new_start = parse_local_datetime(new_start_iso)
  original_start = parse_local_datetime(original_start_iso)
  original_end = parse_local_datetime(original_end_iso)
  if new_start is None or original_start is None or original_end is None:
    return None
  duration = original_end - original_start
  if duration <= timedelta(0):
    duration = timedelta(minutes=DEFAULT_EVENT_DURATION_MINUTES)
  return (new_start + duration).strftime(LOCAL_DATETIME_FORMAT)


def format_local_now(current_date: str, timezone_name: str) -> str:
  """Human-readable "current local time" line for prompts."""
  raw = (current_date or "").strip()
  if not raw:
    return ""
  parsed: Optional[datetime] = None
  try:
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
  except ValueError:
    parsed = None

  if parsed is None:
    day = try_parse_date(raw)
    return day.strftime("%A, %B %d, %Y") if day else raw

  if parsed.tzinfo is not None:
    parsed = parsed.astimezone(ZoneInfo(resolve_timezone(timezone_name)))
  elif ("T" not in raw) and (" " not in raw):
    return parsed.strftime("%A, %B %d, %Y")
  return parsed.strftime("%A, %B %d, %Y, %I:%M %p")
