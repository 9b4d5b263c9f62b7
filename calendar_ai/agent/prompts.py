from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from .normalizer import date_part, format_local_now, resolve_timezone
from .schemas import ConversationTurn, EditingEvent, PreviousEvent, RequestContext

Message = Dict[str, str]

# -------------------------
# LLM 프롬프트
# -------------------------
ASSISTANT_PERSONA = """You are a helpful calendar assistant that specializes in understanding natural language descriptions of events and extracting structured information from them."""

EXTRACTION_SYSTEM_PROMPT_TEMPLATE = """{PERSONA}

When scheduling events:
- Suggest appropriate times based on activity type (workouts in morning/evening, meetings during work hours)
- Consider what makes sense for humans (no workouts at 2am)
- If no specific time given, suggest reasonable defaults for FUTURE dates/times
- ALWAYS suggest times that are in the future, never in the past
- User is in timezone: {TIMEZONE}
- Current local time: {LOCAL_NOW}
- Working hours: {WORKING_START} - {WORKING_END}

When suggesting times, use the user's local timezone and be specific about dates.
If user says "tomorrow" or relative dates, calculate the actual date.
If user just says a time like "7am", assume it's for the next appropriate day (today if time hasn't passed, tomorrow if it has).

IMPORTANT: If the user requests multiple events (like "schedule multiple meetings" or "create a series of events"), create multiple events with appropriate spacing and progression.
For recurring activities, create a series of events with logical progression and variety.
When users say things like "that doesn't feel like enough" or ask for more comprehensive programs, create additional events to provide a complete schedule.

Return exactly one JSON object with:
- events: array of event objects (use this for multiple events)
- title: single event title (use this for single events)
- startDate: date in YYYY-MM-DD format (ensure this is a FUTURE date)
- startTime: time in "H:MM AM/PM" format (suggest appropriate time if none given)
- endTime: end time in "H:MM AM/PM" format (estimate duration)
- isAllDay: true only for all-day events
- description: brief description
- location: location if mentioned
- color: suggested color category (yellow, orange, blue, purple, green, red, black, pink)
- confidence: 0-100 (how sure you are)
- questions: array of follow-up questions if needed
- chatMessage: natural language response explaining what you scheduled

Color categorization guide:
- yellow: energy, joy, warmth (parties, celebrations, fun activities)
- orange: creativity, enthusiasm, excitement (workshops, brainstorming, meetings)
- blue: calm, patience, security (appointments, consultations, therapy)
- purple: ambition, wisdom, power (leadership, strategy, executive meetings)
- green: growth, healing, balance (health, wellness, exercise, nature)
- red: action, attention, determination (urgent, deadlines, important)
- black: formality, mystery, sophistication (business, interviews, presentations)
- pink: kindness, sensitivity, optimism (romantic, dates, care, support)

For multiple events, return an "events" array; each event object has: title, startDate, startTime, endTime, description, location, color.
For single events, return the individual fields at the top level.

{CLOSING_RULE}"""

_FUTURE_RULE = "IMPORTANT: Make sure startDate is always in the future, never today if the time has already passed."
_EDITING_RULE = ("IMPORTANT: You are editing an existing event. Only include fields that the user specifically wants to change. "
                 "If they don't mention a field, leave it out so the original value is kept.")

EDITING_PROMPT_TEMPLATE = """You are editing an existing event. Here are the current details:
Title: {TITLE}
Start Time: {START}
End Time: {END}
Location: {LOCATION}

The user wants to modify this event. Only change the fields they specifically mention. If they don't mention a field, keep the original value."""

PREVIOUS_EVENTS_PROMPT_TEMPLATE = """Previously created events:
{SUMMARY}

When users ask for "more" events or say "that doesn't feel like enough", they want additional sessions beyond what was already created."""

FOLLOW_UP_PROMPT_TEMPLATE = """Continue the conversation about scheduling this event. The user has provided additional information.

Conversation history: {HISTORY}
User's new response: "{RESPONSE}"
Current partial event data: {EVENT_DATA}

Please provide a helpful response and updated event data if the user provided clarification.
Include the updated event data as one JSON object with the fields title, startTime, endTime, location, description."""

SUGGESTION_SYSTEM_PROMPT = "You are a scheduling assistant. Provide specific datetime suggestions in ISO format."

SUGGESTION_PROMPT_TEMPLATE = """Given this event request and existing calendar, suggest optimal times:

Event request: {EVENT}
Existing events: {EXISTING}
Preferences: {PREFERENCES}

Provide 3-5 specific time suggestions as ISO datetime strings."""


def build_extraction_system_prompt(context: RequestContext) -> str:
  timezone_name = resolve_timezone(context.timezone)
  closing = _EDITING_RULE if context.editing_context is not None else _FUTURE_RULE
  return (EXTRACTION_SYSTEM_PROMPT_TEMPLATE
          .replace("{PERSONA}", ASSISTANT_PERSONA)
          .replace("{TIMEZONE}", timezone_name)
          .replace("{LOCAL_NOW}", format_local_now(context.current_date, timezone_name))
          .replace("{WORKING_START}", context.working_hours.start)
          .replace("{WORKING_END}", context.working_hours.end)
          .replace("{CLOSING_RULE}", closing))


def build_editing_prompt(editing: EditingEvent) -> str:
  return (EDITING_PROMPT_TEMPLATE
          .replace("{TITLE}", editing.title or "Untitled")
          .replace("{START}", editing.start_time or "Not specified")
          .replace("{END}", editing.end_time or "Not specified")
          .replace("{LOCATION}", editing.location or "Not specified"))


def summarize_previous_events(previous_events: List[PreviousEvent]) -> str:
  lines: List[str] = []
  for index, event in enumerate(previous_events, start=1):
    title = event.title or "Untitled"
    when = date_part(event.start_time) or (event.start_time or "unknown date")
    lines.append(f"{index}. {title} on {when}")
  return "\n".join(lines)


def _history_messages(conversation: List[ConversationTurn]) -> List[Message]:
  return [{"role": turn.role, "content": turn.content} for turn in conversation]


def build_messages(input_text: str, context: RequestContext) -> List[Message]:
  """
    Ordered chat messages for one extraction call. The caller's history is
    copied, never modified, and the new user input is always last.
    """
  messages: List[Message] = [{
      "role": "system",
      "content": build_extraction_system_prompt(context),
  }]

  messages.extend(_history_messages(context.conversation))

  event_data = context.event_data or {}
  if event_data.get("title") or event_data.get("startTime"):
    messages.append({
        "role": "assistant",
        "content": f"Current event: {event_data.get('title')} at {event_data.get('startTime')}",
    })

  if context.previous_events:
    messages.append({
        "role": "system",
        "content": PREVIOUS_EVENTS_PROMPT_TEMPLATE.replace(
            "{SUMMARY}", summarize_previous_events(context.previous_events)),
    })

  editing = context.editing_context
  if editing is not None:
    messages.append({
        "role": "system",
        "content": build_editing_prompt(editing),
    })

  messages.append({"role": "user", "content": input_text})
  return messages


def build_follow_up_messages(response: str,
                             history: List[ConversationTurn],
                             event_data: Optional[Dict[str, Any]]) -> List[Message]:
  history_text = "\n".join(f"{turn.role}: {turn.content}" for turn in history)
  prompt = (FOLLOW_UP_PROMPT_TEMPLATE
            .replace("{HISTORY}", history_text)
            .replace("{RESPONSE}", response)
            .replace("{EVENT_DATA}", json.dumps(event_data or {}, ensure_ascii=False)))
  return [
      {"role": "system", "content": ASSISTANT_PERSONA},
      {"role": "user", "content": prompt},
  ]


def build_suggestion_messages(event_details: Dict[str, Any],
                              existing_events: List[Dict[str, Any]],
                              preferences: Dict[str, Any]) -> List[Message]:
  prompt = (SUGGESTION_PROMPT_TEMPLATE
            .replace("{EVENT}", json.dumps(event_details, ensure_ascii=False))
            .replace("{EXISTING}", json.dumps(existing_events, ensure_ascii=False))
            .replace("{PREFERENCES}", json.dumps(preferences, ensure_ascii=False)))
  return [
      {"role": "system", "content": SUGGESTION_SYSTEM_PROMPT},
      {"role": "user", "content": prompt},
  ]
