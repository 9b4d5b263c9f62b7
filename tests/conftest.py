"""Shared fakes for the calendar AI test suite.

Nothing here touches the network: the OpenAI client is an ``AsyncMock``
returning canned completions and the Supabase client is a ``MagicMock``
whose query builder chains back to itself.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from calendar_ai.agent.schemas import RequestContext


def make_completion(content: Any) -> SimpleNamespace:
    """Build an object shaped like ``ChatCompletion`` with one choice."""
    message = SimpleNamespace(content=content)
    usage = SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


def make_openai_client(content: Any = None, *, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        client.chat.completions.create = AsyncMock(return_value=make_completion(content))
    return client


def make_query(data: Any = None, *, error: Exception | None = None) -> MagicMock:
    """A postgrest-style builder: every filter returns itself, ``execute`` returns ``data``."""
    query = MagicMock()
    for name in ("select", "eq", "order", "gte", "lte", "single", "insert", "update", "delete"):
        getattr(query, name).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = SimpleNamespace(data=data)
    return query


def make_supabase_client(query: MagicMock) -> MagicMock:
    client = MagicMock()
    client.table.return_value = query
    return client


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(current_date="2024-03-01T09:00:00", timezone="UTC")
