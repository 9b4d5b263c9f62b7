from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import (
    DEFAULT_COLOR,
    DEFAULT_CONFIDENCE,
    DEFAULT_TIMEZONE,
    DEFAULT_WORKING_HOURS_END,
    DEFAULT_WORKING_HOURS_START,
)
from ..errors import ModelError

Role = Literal["system", "user", "assistant"]


def clamp_confidence(value: Any, default: int = DEFAULT_CONFIDENCE) -> int:
  if isinstance(value, bool):
    return default
  if isinstance(value, str):
    value = value.strip().rstrip("%")
  try:
    number = int(round(float(value)))
  except (TypeError, ValueError, OverflowError):
    return default
  return max(0, min(100, number))


# ---------------------------------------------------------------------------
#  Request context
# ---------------------------------------------------------------------------

class WorkingHours(BaseModel):
  model_config = ConfigDict(extra="ignore")

  start: str = DEFAULT_WORKING_HOURS_START
  end: str = DEFAULT_WORKING_HOURS_END


class ConversationTurn(BaseModel):
  model_config = ConfigDict(extra="ignore")

  role: Role
  content: str = ""
  timestamp: Optional[str] = None


class EditingEvent(BaseModel):
  """Prior values of the event being edited; fallbacks during reconciliation."""
  model_config = ConfigDict(extra="ignore", populate_by_name=True)

  title: Optional[str] = None
  start_time: Optional[str] = Field(default=None, alias="startTime")
  end_time: Optional[str] = Field(default=None, alias="endTime")
  location: Optional[str] = None
  description: Optional[str] = None
  color: Optional[str] = None
  is_all_day: Optional[bool] = Field(default=None, alias="isAllDay")


class PreviousEvent(BaseModel):
  model_config = ConfigDict(extra="ignore", populate_by_name=True)

  title: Optional[str] = None
  start_time: Optional[str] = Field(default=None, alias="startTime")


class RequestContext(BaseModel):
  """Every context field a caller may send with an extraction request."""
  model_config = ConfigDict(extra="ignore", populate_by_name=True)

  current_date: str = Field(alias="currentDate")
  timezone: str = DEFAULT_TIMEZONE
  working_hours: WorkingHours = Field(default_factory=WorkingHours,
                                      alias="workingHours")
  conversation: List[ConversationTurn] = Field(default_factory=list)
  event_data: Optional[Dict[str, Any]] = Field(default=None, alias="eventData")
  previous_events: List[PreviousEvent] = Field(default_factory=list,
                                               alias="previousEvents")
  is_editing: bool = Field(default=False, alias="isEditing")
  editing_event: Optional[EditingEvent] = Field(default=None, alias="editingEvent")

  @property
  def editing_context(self) -> Optional[EditingEvent]:
    if self.is_editing and self.editing_event is not None:
      return self.editing_event
    return None


# ---------------------------------------------------------------------------
#  Extraction output
# ---------------------------------------------------------------------------

class EventDraft(BaseModel):
  model_config = ConfigDict(extra="ignore", populate_by_name=True)

  title: Optional[str] = None
  start_time: Optional[str] = Field(default=None, alias="startTime")
  end_time: Optional[str] = Field(default=None, alias="endTime")
  location: Optional[str] = None
  description: Optional[str] = None
  color: str = DEFAULT_COLOR
  confidence: int = DEFAULT_CONFIDENCE
  is_all_day: bool = Field(default=False, alias="isAllDay")
  original_input: str = Field(default="", alias="originalInput")

  @field_validator("confidence", mode="before")
  @classmethod
  def _clamp(cls, value: Any) -> int:
    return clamp_confidence(value)

  def public_fields(self) -> Dict[str, Any]:
    return self.model_dump(by_alias=True, exclude={"original_input"})


class ExtractionResult(BaseModel):
  """One model call's worth of interpreted output. Built once, never mutated."""
  model_config = ConfigDict(frozen=True)

  event: Optional[EventDraft] = None
  events: Optional[List[EventDraft]] = None
  is_multiple_events: bool = False
  confidence: int = DEFAULT_CONFIDENCE
  questions: List[str] = Field(default_factory=list)
  chat_response: str = ""
  original_input: str = ""

  @field_validator("confidence", mode="before")
  @classmethod
  def _clamp(cls, value: Any) -> int:
    return clamp_confidence(value)

  @property
  def drafts(self) -> List[EventDraft]:
    if self.is_multiple_events:
      return list(self.events or [])
    return [self.event] if self.event is not None else []

  def to_response(self) -> Dict[str, Any]:
    body: Dict[str, Any] = {}
    if self.is_multiple_events:
      body["events"] = [draft.public_fields() for draft in self.events or []]
    elif self.event is not None:
      body.update(self.event.public_fields())
    body.update({
        "confidence": self.confidence,
        "questions": list(self.questions),
        "chatResponse": self.chat_response,
        "originalInput": self.original_input,
        "isMultipleEvents": self.is_multiple_events,
    })
    return body


# ---------------------------------------------------------------------------
#  Model round trip / follow-up
# ---------------------------------------------------------------------------

class ModelResult(BaseModel):
  """Success or failure of a single chat-completion round trip."""
  model_config = ConfigDict(extra="forbid")

  text: str = ""
  model: str = ""
  error: Optional[str] = None
  error_kind: Optional[str] = None
  latency_ms: Optional[float] = None
  usage: Optional[Dict[str, Any]] = None

  @property
  def ok(self) -> bool:
    return self.error is None and bool(self.text)

  def unwrap(self) -> str:
    if self.ok:
      return self.text
    raise ModelError(self.error or "No response from AI",
                     kind=self.error_kind or "empty_response")


class FollowUpResult(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  message: str
  updated_event_data: Dict[str, Any] = Field(default_factory=dict,
                                             alias="updatedEventData")
  is_complete: bool = Field(default=False, alias="isComplete")
