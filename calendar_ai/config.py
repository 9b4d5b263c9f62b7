from __future__ import annotations

import os

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
LLM_DEBUG = os.getenv("LLM_DEBUG", "0") == "1"

# -------------------------
# Model settings
# -------------------------
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.3"))
OPENAI_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", "1000"))
OPENAI_JSON_MODE = os.getenv("OPENAI_JSON_MODE", "1") == "1"
SUGGESTION_TEMPERATURE = 0.1
SUGGESTION_MAX_TOKENS = 200
MAX_SUGGESTIONS = 5

# -------------------------
# Supabase
# -------------------------
SUPABASE_URL = os.getenv("SUPABASE_URL", "").strip()
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "").strip()
USER_SYNC_TIMEOUT_SECONDS = float(os.getenv("USER_SYNC_TIMEOUT_SECONDS", "10"))

# -------------------------
# Calendar defaults
# -------------------------
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "America/New_York")
DEFAULT_WORKING_HOURS_START = "09:00"
DEFAULT_WORKING_HOURS_END = "17:00"
DEFAULT_MEETING_DURATION_MINUTES = 30
DEFAULT_EVENT_DURATION_MINUTES = 60
DEFAULT_COLOR = "blue"
DEFAULT_CONFIDENCE = 80
PARSE_FAILURE_CONFIDENCE = 20
MODEL_FAILURE_CONFIDENCE = 0

API_BASE = os.getenv("API_BASE", "/api")
CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "")
CORS_ALLOW_ORIGIN_REGEX = os.getenv("CORS_ALLOW_ORIGIN_REGEX", "").strip()
FRONTEND_BASE_URL = os.getenv("FRONTEND_BASE_URL", "").rstrip("/")
cors_origins: list[str] = []
if FRONTEND_BASE_URL:
    cors_origins.append(FRONTEND_BASE_URL)
if CORS_ALLOW_ORIGINS:
    cors_origins.extend(
        [origin.strip() for origin in CORS_ALLOW_ORIGINS.split(",") if origin.strip()])
