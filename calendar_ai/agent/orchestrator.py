from __future__ import annotations

from typing import Any, Optional

from ..config import OPENAI_JSON_MODE, OPENAI_MAX_TOKENS, OPENAI_MODEL, OPENAI_TEMPERATURE
from ..errors import ModelError
from ..utils import _log_debug
from .interpreter import interpret_response, model_failure_result
from .llm_provider import invoke_model
from .normalizer import normalize_input_as_text
from .prompts import build_messages
from .schemas import ExtractionResult, RequestContext


async def parse_event_description(client: Any,
                                  input_text: str,
                                  context: RequestContext,
                                  *,
                                  model: Optional[str] = None,
                                  temperature: Optional[float] = None,
                                  max_tokens: Optional[int] = None) -> ExtractionResult:
  """
    Free text + context -> ExtractionResult.

    Prompt -> one model call -> interpretation (normalize, reconcile,
    split). Model failures come back as a confidence-0 clarification
    result; nothing here raises for provider or parse problems.
    """
  text = normalize_input_as_text(input_text)
  messages = build_messages(text, context)
  result = await invoke_model(
      client,
      messages,
      model=model or OPENAI_MODEL,
      temperature=OPENAI_TEMPERATURE if temperature is None else temperature,
      max_tokens=max_tokens or OPENAI_MAX_TOKENS,
      json_mode=OPENAI_JSON_MODE,
      kind="extract",
  )
  try:
    raw_output = result.unwrap()
  except ModelError as exc:
    print(f"[CALENDAR AI] model call failed kind={exc.kind}: {exc}", flush=True)
    return model_failure_result(text)

  extraction = interpret_response(raw_output, text, context)
  _log_debug(
      f"[CALENDAR AI] drafts={len(extraction.drafts)} multiple={extraction.is_multiple_events} "
      f"confidence={extraction.confidence}")
  return extraction
