from __future__ import annotations

from calendar_ai.agent.prompts import (
    build_follow_up_messages,
    build_messages,
    build_suggestion_messages,
    summarize_previous_events,
)
from calendar_ai.agent.schemas import ConversationTurn, PreviousEvent, RequestContext


def _context(**overrides) -> RequestContext:
    payload = {"currentDate": "2024-03-01T09:00:00", "timezone": "UTC"}
    payload.update(overrides)
    return RequestContext.model_validate(payload)


def test_minimal_context_is_system_then_user():
    messages = build_messages("dentist friday 3pm", _context())

    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[-1]["content"] == "dentist friday 3pm"
    system = messages[0]["content"]
    assert "User is in timezone: UTC" in system
    assert "Friday, March 01, 2024, 09:00 AM" in system
    assert "Working hours: 09:00 - 17:00" in system
    assert "never today if the time has already passed" in system


def test_full_context_ordering():
    ctx = _context(
        conversation=[
            {"role": "user", "content": "book gym"},
            {"role": "assistant", "content": "When?"},
        ],
        eventData={"title": "Gym", "startTime": "2024-03-02T07:00:00"},
        previousEvents=[{"title": "Gym", "startTime": "2024-03-02T07:00:00"}],
        isEditing=True,
        editingEvent={"title": "Gym", "startTime": "2024-03-02T07:00:00"},
    )
    messages = build_messages("make it 8", ctx)

    assert [m["role"] for m in messages] == [
        "system", "user", "assistant", "assistant", "system", "system", "user",
    ]
    assert messages[3]["content"] == "Current event: Gym at 2024-03-02T07:00:00"
    assert "1. Gym on 2024-03-02" in messages[4]["content"]
    assert "You are editing an existing event" in messages[5]["content"]
    assert "Location: Not specified" in messages[5]["content"]
    assert "Only include fields that the user specifically wants to change" in messages[0]["content"]
    assert messages[-1] == {"role": "user", "content": "make it 8"}


def test_editing_event_ignored_when_not_editing():
    ctx = _context(editingEvent={"title": "Standup"})
    messages = build_messages("lunch", ctx)
    assert len(messages) == 2


def test_conversation_is_copied_not_mutated():
    ctx = _context(conversation=[{"role": "user", "content": "hi"}])
    build_messages("lunch", ctx)
    build_messages("dinner", ctx)
    assert len(ctx.conversation) == 1


def test_summarize_previous_events_numbers_lines():
    summary = summarize_previous_events([
        PreviousEvent(title="Run", start_time="2024-03-02T07:00:00"),
        PreviousEvent(title=None, start_time=None),
    ])
    assert summary == "1. Run on 2024-03-02\n2. Untitled on unknown date"


def test_follow_up_messages_embed_history_and_data():
    messages = build_follow_up_messages(
        "at 3pm",
        [ConversationTurn(role="assistant", content="What time?")],
        {"title": "Coffee"},
    )
    assert messages[0]["role"] == "system"
    user = messages[1]["content"]
    assert "assistant: What time?" in user
    assert 'User\'s new response: "at 3pm"' in user
    assert '{"title": "Coffee"}' in user


def test_suggestion_messages_serialize_inputs():
    messages = build_suggestion_messages({"title": "1:1"}, [], {"timezone": "UTC"})
    assert "ISO format" in messages[0]["content"]
    assert '"title": "1:1"' in messages[1]["content"]


def test_history_is_sent_without_follow_up_flag():
    ctx = _context(conversation=[{"role": "user", "content": "book gym"}], isFollowUp=False)
    messages = build_messages("at 7", ctx)
    assert [m["role"] for m in messages] == ["system", "user", "user"]
    assert messages[1]["content"] == "book gym"
    assert not hasattr(ctx, "is_follow_up")
