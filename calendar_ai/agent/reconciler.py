from __future__ import annotations

from typing import Any, Dict, Optional

from ..colors import normalize_color
from ..config import DEFAULT_COLOR
from .normalizer import ensure_end_after_start, parse_local_datetime, shift_end_preserving_duration
from .schemas import EditingEvent, EventDraft


def _pick(new_value: Any, original_value: Any) -> Any:
  if isinstance(new_value, str):
    return new_value if new_value.strip() else original_value
  return original_value if new_value is None else new_value


def _merged_end(fields: Dict[str, Any], editing: EditingEvent,
                start_time: Optional[str]) -> Optional[str]:
  end_time = _pick(fields.get("end_time"), editing.end_time)
  if fields.get("end_time") or not fields.get("start_time"):
    return end_time
  # Start moved, end kept: keep the original length when the old end no
  # longer follows the new start.
  start_dt = parse_local_datetime(start_time)
  end_dt = parse_local_datetime(end_time)
  if start_dt is not None and end_dt is not None and end_dt <= start_dt:
    shifted = shift_end_preserving_duration(start_time, editing.start_time,
                                            editing.end_time)
    if shifted:
      return shifted
  return end_time


def reconcile_event(fields: Dict[str, Any],
                    editing: Optional[EditingEvent],
                    *,
                    confidence: Any,
                    original_input: str) -> EventDraft:
  """
    Finalize one event. Without an editing context the model's fields are
    used as-is; with one, each field independently falls back to the
    original event's value unless the model supplied a non-empty value.
    """
  if editing is None:
    return EventDraft(
        title=fields.get("title"),
        start_time=fields.get("start_time"),
        end_time=fields.get("end_time"),
        location=fields.get("location"),
        description=fields.get("description"),
        color=fields.get("color") or DEFAULT_COLOR,
        is_all_day=bool(fields.get("is_all_day")),
        confidence=confidence,
        original_input=original_input,
    )

  start_time = _pick(fields.get("start_time"), editing.start_time)
  end_time = _merged_end(fields, editing, start_time)
  is_all_day = _pick(fields.get("is_all_day"), editing.is_all_day)
  return EventDraft(
      title=_pick(fields.get("title"), editing.title),
      start_time=start_time,
      end_time=ensure_end_after_start(start_time, end_time),
      location=_pick(fields.get("location"), editing.location),
      description=_pick(fields.get("description"), editing.description),
      color=fields.get("color") or normalize_color(editing.color) or DEFAULT_COLOR,
      is_all_day=bool(is_all_day),
      confidence=confidence,
      original_input=original_input,
  )
