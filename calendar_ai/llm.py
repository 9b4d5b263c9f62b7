from __future__ import annotations

from typing import Optional

from openai import AsyncOpenAI

from .config import OPENAI_API_KEY
from .utils import _log_debug


def build_async_client(api_key: Optional[str] = OPENAI_API_KEY) -> Optional[AsyncOpenAI]:
  """Construct the shared chat-completion client once at process start."""
  if not api_key:
    _log_debug("[LLM] OPENAI_API_KEY is not set; model calls will fail soft")
    return None
  return AsyncOpenAI(api_key=api_key)
