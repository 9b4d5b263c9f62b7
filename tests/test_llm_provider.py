from __future__ import annotations

import pytest

from calendar_ai.agent.llm_provider import clean_json_text, invoke_model
from calendar_ai.errors import ModelError
from tests.conftest import make_openai_client

MESSAGES = [{"role": "user", "content": "hi"}]


@pytest.mark.asyncio
async def test_invoke_model_sends_request_shape():
    client = make_openai_client('{"title": "x"}')

    result = await invoke_model(client, MESSAGES, model="gpt-4o-mini",
                                temperature=0.3, max_tokens=1000, json_mode=True)

    assert result.ok
    assert result.text == '{"title": "x"}'
    assert result.usage == {"prompt": 10, "completion": 5, "total": 15}
    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["messages"] == MESSAGES
    assert kwargs["temperature"] == 0.3
    assert kwargs["max_tokens"] == 1000
    assert kwargs["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_invoke_model_without_json_mode_omits_response_format():
    client = make_openai_client("plain text")
    await invoke_model(client, MESSAGES, model="m", temperature=0.1, max_tokens=200)
    assert "response_format" not in client.chat.completions.create.await_args.kwargs


@pytest.mark.asyncio
async def test_invoke_model_reports_api_error():
    client = make_openai_client(error=RuntimeError("boom"))

    result = await invoke_model(client, MESSAGES, model="m", temperature=0.3, max_tokens=10)

    assert not result.ok
    assert result.error_kind == "api_error"
    with pytest.raises(ModelError) as excinfo:
        result.unwrap()
    assert excinfo.value.kind == "api_error"


@pytest.mark.asyncio
async def test_invoke_model_empty_content():
    result = await invoke_model(make_openai_client("   "), MESSAGES, model="m",
                                temperature=0.3, max_tokens=10)
    assert result.error_kind == "empty_response"
    assert result.error == "No response from AI"


@pytest.mark.asyncio
async def test_invoke_model_without_client():
    result = await invoke_model(None, MESSAGES, model="m", temperature=0.3, max_tokens=10)
    assert result.error_kind == "unavailable"


@pytest.mark.asyncio
async def test_invoke_model_joins_content_parts():
    client = make_openai_client([{"type": "text", "text": "a"}, {"type": "text", "text": "b"}])
    result = await invoke_model(client, MESSAGES, model="m", temperature=0.3, max_tokens=10)
    assert result.text == "a b"


def test_clean_json_text_strips_fences():
    assert clean_json_text('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert clean_json_text('  {"a": 1} ') == '{"a": 1}'
