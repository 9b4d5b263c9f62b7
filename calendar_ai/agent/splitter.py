from __future__ import annotations

from typing import Any, List, Optional

from ..config import DEFAULT_CONFIDENCE
from .event_fields import extract_event_fields
from .reconciler import reconcile_event
from .schemas import EventDraft, clamp_confidence


def multi_event_items(payload: Any) -> Optional[List[Any]]:
  """The event array to split, or None when the payload is a single event."""
  if isinstance(payload, list):
    return payload if payload else None
  if isinstance(payload, dict):
    events = payload.get("events")
    if isinstance(events, list) and events:
      return events
  return None


def split_events(items: List[Any],
                 payload_confidence: Any,
                 original_input: str,
                 timezone_name: str) -> List[EventDraft]:
  """One draft per array element, in order; elements are normalized independently."""
  inherited = clamp_confidence(payload_confidence, default=DEFAULT_CONFIDENCE)
  drafts: List[EventDraft] = []
  for item in items:
    source = item if isinstance(item, dict) else {}
    fields = extract_event_fields(source, timezone_name)
    own = fields.get("confidence")
    confidence = inherited if own is None else clamp_confidence(own, default=inherited)
    drafts.append(reconcile_event(fields, None,
                                  confidence=confidence,
                                  original_input=original_input))
  return drafts
