from __future__ import annotations

from typing import Optional


class CalendarAIError(Exception):
    """Base class for failures raised inside the calendar AI backend."""


class ModelError(CalendarAIError):
    """The chat-completion provider returned no usable content or failed."""

    def __init__(self, message: str, kind: str = "api_error"):
        super().__init__(message)
        self.kind = kind


class ParseError(CalendarAIError):
    """Model output could not be read as a JSON payload."""

    def __init__(self, message: str, raw_output: str = ""):
        super().__init__(message)
        self.raw_output = raw_output


class TimeFormatError(CalendarAIError):
    """A date or clock-time string did not match the accepted formats."""

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message)
        self.value = value


class SyncError(CalendarAIError):
    """Best-effort user record sync did not complete."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code
