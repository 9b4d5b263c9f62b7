from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from ..config import MAX_SUGGESTIONS, OPENAI_MODEL, SUGGESTION_MAX_TOKENS, SUGGESTION_TEMPERATURE
from .llm_provider import invoke_model
from .prompts import build_suggestion_messages

_DATETIME_RE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")


def extract_suggested_times(text: str) -> List[str]:
  return _DATETIME_RE.findall(text or "")[:MAX_SUGGESTIONS]


async def generate_scheduling_suggestions(client: Any,
                                          event_details: Dict[str, Any],
                                          existing_events: List[Dict[str, Any]],
                                          preferences: Dict[str, Any],
                                          *,
                                          model: Optional[str] = None) -> List[str]:
  messages = build_suggestion_messages(event_details, existing_events, preferences)
  result = await invoke_model(
      client,
      messages,
      model=model or OPENAI_MODEL,
      temperature=SUGGESTION_TEMPERATURE,
      max_tokens=SUGGESTION_MAX_TOKENS,
      kind="suggest",
  )
  if not result.ok:
    print(f"[CALENDAR AI] suggestion call failed: {result.error}", flush=True)
    return []
  return extract_suggested_times(result.text)
