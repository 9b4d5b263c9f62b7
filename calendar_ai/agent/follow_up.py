from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

from ..config import OPENAI_MAX_TOKENS, OPENAI_MODEL, OPENAI_TEMPERATURE
from ..errors import ModelError
from .llm_provider import invoke_model
from .prompts import build_follow_up_messages
from .schemas import ConversationTurn, FollowUpResult

_JSON_BLOCK_RE = re.compile(r"\{[\s\S]*\}")
FOLLOW_UP_FAILURE_MESSAGE = "I'm having trouble processing that. Could you please clarify?"
FOLLOW_UP_EMPTY_MESSAGE = "Could you provide more details?"


def _is_complete(event_data: Dict[str, Any]) -> bool:
  return all(event_data.get(key) for key in ("title", "startTime", "endTime"))


def merge_follow_up_answer(answer: str,
                           partial_event_data: Dict[str, Any]) -> FollowUpResult:
  """Pull the embedded JSON block out of a free-text answer and merge it."""
  message = answer
  updated = dict(partial_event_data)
  is_complete = False

  match = _JSON_BLOCK_RE.search(answer)
  if match:
    try:
      extracted = json.loads(match.group(0))
    except ValueError:
      extracted = None
    if isinstance(extracted, dict):
      updated.update(extracted)
      message = answer.replace(match.group(0), "").strip()
      is_complete = _is_complete(extracted)

  return FollowUpResult(
      message=message or FOLLOW_UP_EMPTY_MESSAGE,
      updated_event_data=updated,
      is_complete=is_complete,
  )


async def handle_follow_up(client: Any,
                           response: str,
                           history: List[ConversationTurn],
                           partial_event_data: Optional[Dict[str, Any]] = None,
                           *,
                           model: Optional[str] = None) -> FollowUpResult:
  event_data = dict(partial_event_data or {})
  messages = build_follow_up_messages(response, history, event_data)
  result = await invoke_model(
      client,
      messages,
      model=model or OPENAI_MODEL,
      temperature=OPENAI_TEMPERATURE,
      max_tokens=OPENAI_MAX_TOKENS,
      kind="follow_up",
  )
  try:
    answer = result.unwrap()
  except ModelError as exc:
    print(f"[CALENDAR AI] follow-up failed kind={exc.kind}: {exc}", flush=True)
    return FollowUpResult(message=FOLLOW_UP_FAILURE_MESSAGE,
                          updated_event_data=event_data,
                          is_complete=False)
  return merge_follow_up_answer(answer, event_data)
