from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from .config import LLM_DEBUG


def _log_debug(message: str) -> None:
    if LLM_DEBUG:
        print(message, flush=True)


def _clean_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    cleaned = value.strip()
    return cleaned or None


def _now_iso_second() -> str:
    return datetime.now().strftime("%Y-%m-%dT%H:%M:%S")
