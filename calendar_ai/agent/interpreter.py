from __future__ import annotations

import json
from typing import Any, Dict, List

from ..config import (
    DEFAULT_CONFIDENCE,
    MODEL_FAILURE_CONFIDENCE,
    PARSE_FAILURE_CONFIDENCE,
)
from ..errors import ParseError
from ..utils import _clean_optional_str, _log_debug
from .event_fields import extract_event_fields
from .llm_provider import clean_json_text
from .normalizer import date_part, resolve_timezone
from .reconciler import reconcile_event
from .schemas import ExtractionResult, RequestContext, clamp_confidence
from .splitter import multi_event_items, split_events

PARSE_FAILURE_CHAT = "I'm having trouble understanding your request. Could you provide more details?"
MODEL_FAILURE_QUESTION = ("I encountered an error processing your request. "
                          "Could you please try rephrasing your event description?")


def parse_failure_question(input_text: str) -> str:
  return (f'I couldn\'t fully understand "{input_text}". '
          "Could you please provide more details about the date and time?")


def parse_failure_result(input_text: str) -> ExtractionResult:
  return ExtractionResult(
      confidence=PARSE_FAILURE_CONFIDENCE,
      questions=[parse_failure_question(input_text)],
      chat_response=PARSE_FAILURE_CHAT,
      original_input=input_text,
  )


def model_failure_result(input_text: str) -> ExtractionResult:
  return ExtractionResult(
      confidence=MODEL_FAILURE_CONFIDENCE,
      questions=[MODEL_FAILURE_QUESTION],
      chat_response=MODEL_FAILURE_QUESTION,
      original_input=input_text,
  )


def parse_model_payload(raw_output: str) -> Any:
  cleaned = clean_json_text(raw_output)
  try:
    payload = json.loads(cleaned)
  except (TypeError, ValueError) as exc:
    raise ParseError(f"Model output is not valid JSON: {exc}", raw_output=raw_output) from exc
  if not isinstance(payload, (dict, list)):
    raise ParseError("Model output is not a JSON object or array.", raw_output=raw_output)
  return payload


def _coerce_questions(value: Any) -> List[str]:
  if isinstance(value, str):
    value = [value]
  if not isinstance(value, list):
    return []
  questions: List[str] = []
  for item in value:
    cleaned = _clean_optional_str(item) if isinstance(item, str) else None
    if cleaned:
      questions.append(cleaned)
  return questions


def _build_multi_event_result(payload: Any, items: List[Any], input_text: str,
                              context: RequestContext) -> ExtractionResult:
  meta: Dict[str, Any] = payload if isinstance(payload, dict) else {}
  drafts = split_events(items, meta.get("confidence"), input_text,
                        resolve_timezone(context.timezone))
  chat = _clean_optional_str(meta.get("chatMessage")) or f"I've scheduled {len(drafts)} events for you."
  return ExtractionResult(
      events=drafts,
      is_multiple_events=True,
      confidence=clamp_confidence(meta.get("confidence"), default=DEFAULT_CONFIDENCE),
      questions=_coerce_questions(meta.get("questions")),
      chat_response=chat,
      original_input=input_text,
  )


def _build_single_event_result(payload: Dict[str, Any], input_text: str,
                               context: RequestContext) -> ExtractionResult:
  editing = context.editing_context
  fallback_date = date_part(editing.start_time) if editing is not None else None
  fields = extract_event_fields(payload, resolve_timezone(context.timezone),
                                fallback_date=fallback_date)
  confidence = clamp_confidence(payload.get("confidence"), default=DEFAULT_CONFIDENCE)
  draft = reconcile_event(fields, editing,
                          confidence=confidence,
                          original_input=input_text)

  chat = _clean_optional_str(payload.get("chatMessage"))
  if not chat:
    verb = "updated" if editing is not None else "scheduled"
    chat = f'I\'ve {verb} "{draft.title or "your event"}" for {draft.start_time or "the requested time"}'
  return ExtractionResult(
      event=draft,
      is_multiple_events=False,
      confidence=confidence,
      questions=_coerce_questions(payload.get("questions")),
      chat_response=chat,
      original_input=input_text,
  )


def interpret_response(raw_output: str, input_text: str,
                       context: RequestContext) -> ExtractionResult:
  """
    Model text -> ExtractionResult. Total: invalid JSON becomes the
    low-confidence clarification result instead of an error.
    """
  try:
    payload = parse_model_payload(raw_output)
  except ParseError as exc:
    _log_debug(f"[INTERPRETER] {exc} raw={exc.raw_output[:300]!r}")
    return parse_failure_result(input_text)

  items = multi_event_items(payload)
  if items is not None:
    return _build_multi_event_result(payload, items, input_text, context)
  single = payload if isinstance(payload, dict) else {}
  return _build_single_event_result(single, input_text, context)
