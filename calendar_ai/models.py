from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any, Literal

from .agent.schemas import ConversationTurn, RequestContext, WorkingHours
from .config import DEFAULT_MEETING_DURATION_MINUTES, DEFAULT_TIMEZONE


# -------------------------
# Store rows
# -------------------------
class EventCreate(BaseModel):
    title: str
    start_time: str
    end_time: str
    description: Optional[str] = None
    location: Optional[str] = None
    color: Optional[str] = None
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    is_all_day: Optional[bool] = None
    is_recurring: Optional[bool] = None
    recurrence_rule: Optional[str] = None
    original_input: Optional[str] = None
    ai_extracted_data: Optional[Dict[str, Any]] = None
    reminders: Optional[List[Any]] = None
    status: Optional[Literal["tentative", "confirmed", "cancelled"]] = None


class EventUpdate(BaseModel):
    title: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    color: Optional[str] = None
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    is_all_day: Optional[bool] = None
    status: Optional[Literal["tentative", "confirmed", "cancelled"]] = None


class PreferencesUpdate(BaseModel):
    timezone: Optional[str] = None
    default_meeting_duration: Optional[int] = Field(default=None, ge=1)
    working_hours_start: Optional[str] = None
    working_hours_end: Optional[str] = None
    week_starts_on: Optional[int] = Field(default=None, ge=0, le=6)
    reminder_defaults: Optional[List[str]] = None
    notification_preferences: Optional[Dict[str, Any]] = None


class AuthUser(BaseModel):
    """The subset of an auth provider user record used to sync the users table."""
    model_config = ConfigDict(extra="ignore")

    id: str
    email: Optional[str] = None
    email_confirmed_at: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)
    app_metadata: Dict[str, Any] = Field(default_factory=dict)


class SyncResult(BaseModel):
    ok: bool
    action: Literal["exists", "created", "relinked", "skipped"] = "skipped"
    error: Optional[str] = None


class ConversationCreate(BaseModel):
    user_id: str
    event_id: Optional[str] = None
    messages: List[ConversationTurn] = Field(default_factory=list)
    context: Optional[Dict[str, Any]] = None


class ConversationMessages(BaseModel):
    messages: List[ConversationTurn]


class ConversationStatusUpdate(BaseModel):
    status: Literal["active", "completed", "abandoned"]


# -------------------------
# AI endpoints
# -------------------------
class ParseEventRequest(BaseModel):
    input: Optional[str] = None
    context: Optional[RequestContext] = None


class FollowUpRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: str
    history: List[ConversationTurn] = Field(default_factory=list)
    event_data: Dict[str, Any] = Field(default_factory=dict, alias="eventData")


class SuggestionPreferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    working_hours: WorkingHours = Field(default_factory=WorkingHours,
                                        alias="workingHours")
    timezone: str = DEFAULT_TIMEZONE
    default_duration: int = Field(default=DEFAULT_MEETING_DURATION_MINUTES,
                                  alias="defaultDuration")


class SuggestionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_details: Dict[str, Any] = Field(default_factory=dict, alias="eventDetails")
    existing_events: List[Dict[str, Any]] = Field(default_factory=list,
                                                  alias="existingEvents")
    preferences: SuggestionPreferences = Field(default_factory=SuggestionPreferences)


class ColorSuggestRequest(BaseModel):
    title: str
    description: Optional[str] = None
