from __future__ import annotations

import pytest

from calendar_ai.agent import generate_scheduling_suggestions, handle_follow_up
from calendar_ai.agent.follow_up import (
    FOLLOW_UP_EMPTY_MESSAGE,
    FOLLOW_UP_FAILURE_MESSAGE,
    merge_follow_up_answer,
)
from calendar_ai.agent.schemas import ConversationTurn
from calendar_ai.agent.suggestions import extract_suggested_times
from tests.conftest import make_openai_client


def test_merge_follow_up_answer_complete():
    answer = ('Great, 3pm it is. {"startTime": "2024-03-02T15:00:00", '
              '"endTime": "2024-03-02T16:00:00", "title": "Coffee"}')

    result = merge_follow_up_answer(answer, {"title": "Coffee", "location": "Cafe"})

    assert result.is_complete
    assert result.message == "Great, 3pm it is."
    assert result.updated_event_data["location"] == "Cafe"
    assert result.updated_event_data["startTime"] == "2024-03-02T15:00:00"


def test_merge_follow_up_answer_partial_block_is_not_complete():
    result = merge_follow_up_answer('{"startTime": "2024-03-02T15:00:00"}', {"title": "Coffee"})
    assert not result.is_complete
    assert result.message == FOLLOW_UP_EMPTY_MESSAGE


def test_merge_follow_up_answer_without_json():
    result = merge_follow_up_answer("What time works?", {"title": "Coffee"})
    assert result.message == "What time works?"
    assert result.updated_event_data == {"title": "Coffee"}
    assert not result.is_complete


@pytest.mark.asyncio
async def test_handle_follow_up_calls_model_without_json_mode():
    client = make_openai_client("Which day?")
    history = [ConversationTurn(role="user", content="coffee with Ana")]

    result = await handle_follow_up(client, "at 3", history, {"title": "Coffee"})

    assert result.message == "Which day?"
    kwargs = client.chat.completions.create.await_args.kwargs
    assert "response_format" not in kwargs
    assert "user: coffee with Ana" in kwargs["messages"][1]["content"]


@pytest.mark.asyncio
async def test_handle_follow_up_failure():
    client = make_openai_client(error=RuntimeError("down"))

    result = await handle_follow_up(client, "at 3", [], {"title": "Coffee"})

    assert result.message == FOLLOW_UP_FAILURE_MESSAGE
    assert result.updated_event_data == {"title": "Coffee"}
    assert result.model_dump(by_alias=True)["isComplete"] is False


def test_extract_suggested_times_caps_at_five():
    text = " ".join(f"2024-03-0{day}T10:00:00" for day in range(1, 8))
    times = extract_suggested_times(text)
    assert len(times) == 5
    assert times[0] == "2024-03-01T10:00:00"


@pytest.mark.asyncio
async def test_generate_scheduling_suggestions_uses_low_temperature():
    client = make_openai_client("Try 2024-03-04T10:00:00 or 2024-03-05T14:30:00.")

    times = await generate_scheduling_suggestions(client, {"title": "1:1"}, [], {"timezone": "UTC"})

    assert times == ["2024-03-04T10:00:00", "2024-03-05T14:30:00"]
    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["temperature"] == 0.1
    assert kwargs["max_tokens"] == 200


@pytest.mark.asyncio
async def test_generate_scheduling_suggestions_failure_is_empty():
    client = make_openai_client(error=RuntimeError("down"))
    assert await generate_scheduling_suggestions(client, {}, [], {}) == []
