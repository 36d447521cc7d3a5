"""tests/conftest.py

Pytest configuration and shared fixtures for the switchboard test suite.
"""

from __future__ import annotations

# Standard Library
import json
import random
from collections.abc import Callable
from typing import Any
from unittest.mock import Mock

# Third-Party Libraries
import pytest

# Local Modules
from switchboard.agents import Agent, Domain
from switchboard.config import ModelOptions
from switchboard.tools import CalculatorTool, SearchTool, TranslateTool, WeatherTool

ResponseFactory = Callable[..., dict[str, Any]]
ToolCallFactory = Callable[..., dict[str, Any]]


@pytest.fixture
def model_options() -> ModelOptions:
    """Model options used by every orchestrator under test."""
    return ModelOptions(model="gpt-test", max_tokens=256, temperature=0.5)


@pytest.fixture
def tool_call() -> ToolCallFactory:
    """Build a raw ``tool_calls`` entry as returned by the API.

    Returns:
        Factory taking ``(name, arguments, call_id="call_1")``; ``arguments``
        may be a mapping (JSON-encoded) or a raw string sent as-is.
    """

    def _make(name: str, arguments: Any = None, call_id: str = "call_1") -> dict[str, Any]:
        if arguments is None:
            arguments = {}
        raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
        return {
            "id": call_id,
            "type": "function",
            "function": {"name": name, "arguments": raw},
        }

    return _make


@pytest.fixture
def completion() -> ResponseFactory:
    """Build a chat-completion response body.

    Returns:
        Factory taking ``(content="", tool_calls=None)``.
    """

    def _make(
        content: str | None = "",
        tool_calls: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        message: dict[str, Any] = {"role": "assistant", "content": content}
        if tool_calls:
            message["tool_calls"] = tool_calls
        return {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "model": "gpt-test",
            "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
        }

    return _make


@pytest.fixture
def mock_client() -> Mock:
    """Mock model client answering every call with a plain message.

    Returns:
        Mock with a ``complete`` method; override ``return_value`` or
        ``side_effect`` per test.
    """
    client = Mock()
    client.complete.return_value = {
        "choices": [{"message": {"role": "assistant", "content": "This is a test response."}}]
    }
    return client


@pytest.fixture
def specialists() -> list[Agent]:
    """The four stock specialists with a seeded weather tool."""
    return [
        Agent(
            "Weather Agent",
            "You provide weather information.",
            tools=[WeatherTool(rng=random.Random(7))],
            domain=Domain.WEATHER,
        ),
        Agent(
            "Spanish Agent",
            "You translate between English and Spanish.",
            tools=[TranslateTool()],
            domain=Domain.TRANSLATION,
        ),
        Agent(
            "Math Agent",
            "You perform simple arithmetic.",
            tools=[CalculatorTool()],
            domain=Domain.MATH,
        ),
        Agent(
            "Search Agent",
            "You search for information.",
            tools=[SearchTool()],
            domain=Domain.SEARCH,
        ),
    ]


@pytest.fixture
def chunk() -> ResponseFactory:
    """Build one streamed ``chat.completion.chunk`` body.

    Returns:
        Factory taking ``(content=None, tool_calls=None)``; ``tool_calls``
        are raw delta fragments carrying an ``index``.
    """

    def _make(
        content: str | None = None,
        tool_calls: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        delta: dict[str, Any] = {}
        if content is not None:
            delta["content"] = content
        if tool_calls:
            delta["tool_calls"] = tool_calls
        return {
            "id": "chatcmpl-test",
            "object": "chat.completion.chunk",
            "model": "gpt-test",
            "choices": [{"index": 0, "delta": delta, "finish_reason": None}],
        }

    return _make
