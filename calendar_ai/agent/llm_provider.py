from __future__ import annotations

import re
import time
from typing import Any, Dict, List, Optional

from ..config import LLM_DEBUG
from .schemas import ModelResult


def _print_raw_output(*,
                      kind: str,
                      model: str,
                      raw_output: str,
                      latency_ms: Optional[float] = None,
                      usage: Optional[Dict[str, Any]] = None) -> None:
  if not LLM_DEBUG:
    return
  meta_parts = [
      f"kind={kind}",
      f"model={model}",
  ]
  if latency_ms is not None:
    meta_parts.append(f"latency_ms={latency_ms:.1f}")
  if usage:
    meta_parts.append(
        f"usage=prompt:{usage.get('prompt')},completion:{usage.get('completion')},total:{usage.get('total')}")
  print(f"[CALENDAR LLM RAW] {' '.join(meta_parts)}", flush=True)
  print(raw_output if raw_output else "(empty)", flush=True)
  print("[CALENDAR LLM RAW END]", flush=True)


def _extract_message_text(content: Any) -> str:
  if isinstance(content, str):
    return content.strip()
  if isinstance(content, list):
    chunks = []
    for item in content:
      if isinstance(item, dict):
        text_val = item.get("text")
        if isinstance(text_val, str) and text_val.strip():
          chunks.append(text_val.strip())
      elif isinstance(item, str) and item.strip():
        chunks.append(item.strip())
    return " ".join(chunks).strip()
  return ""


def _usage_dict(completion: Any) -> Optional[Dict[str, Any]]:
  usage_obj = getattr(completion, "usage", None)
  if usage_obj is None:
    return None
  return {
      "prompt": getattr(usage_obj, "prompt_tokens", None),
      "completion": getattr(usage_obj, "completion_tokens", None),
      "total": getattr(usage_obj, "total_tokens", None),
  }


def clean_json_text(text: str) -> str:
  cleaned = (text or "").strip()
  if cleaned.startswith("```"):
    cleaned = re.sub(r"^```[a-zA-Z0-9_-]*\s*", "", cleaned).strip()
    cleaned = re.sub(r"\s*```$", "", cleaned).strip()
  return cleaned


async def invoke_model(client: Any,
                       messages: List[Dict[str, str]],
                       *,
                       model: str,
                       temperature: float,
                       max_tokens: int,
                       json_mode: bool = False,
                       kind: str = "extract") -> ModelResult:
  """
    One chat-completion round trip. Never raises: provider failures come
    back as a ModelResult carrying error/error_kind.
    """
  if client is None:
    return ModelResult(model=model,
                       error="OPENAI_API_KEY is not set",
                       error_kind="unavailable")

  request: Dict[str, Any] = {
      "model": model,
      "messages": messages,
      "temperature": temperature,
      "max_tokens": max_tokens,
  }
  if json_mode:
    request["response_format"] = {"type": "json_object"}

  started = time.perf_counter()
  try:
    completion = await client.chat.completions.create(**request)
  except Exception as exc:
    print(f"[CALENDAR LLM ERROR] kind={kind} model={model} error={exc}", flush=True)
    return ModelResult(model=model, error=str(exc), error_kind="api_error")
  latency_ms = (time.perf_counter() - started) * 1000.0

  choices = getattr(completion, "choices", None) or []
  raw_output = ""
  if choices:
    message = getattr(choices[0], "message", None)
    raw_output = _extract_message_text(getattr(message, "content", None))
  usage = _usage_dict(completion)
  _print_raw_output(kind=kind,
                    model=model,
                    raw_output=raw_output,
                    latency_ms=latency_ms,
                    usage=usage)

  if not raw_output:
    return ModelResult(model=model,
                       error="No response from AI",
                       error_kind="empty_response",
                       latency_ms=latency_ms,
                       usage=usage)
  return ModelResult(text=raw_output,
                     model=model,
                     latency_ms=latency_ms,
                     usage=usage)
