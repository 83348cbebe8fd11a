"""Pytest configuration and shared fixtures for the msg-ai test suite."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest

from msg_ai.providers.registry import BUILTIN_PROVIDERS
from msg_ai.providers.types import ChatMessage, MessageRole


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


def _provider_env_vars():
    names = {"MSG_AI_PROVIDER", "MSG_AI_MODEL", "DEBUG"}
    for provider_class in BUILTIN_PROVIDERS:
        config = provider_class.CONFIG
        names.add(config.env_key)
        names.update(config.alternative_env_keys)
        names.add(config.base_url_env_key)
    return sorted(names)


PROVIDER_ENV_VARS = _provider_env_vars()


@pytest.fixture(autouse=True)
def _clean_provider_env(monkeypatch):
    """Keep real credentials on the developer machine out of unit tests."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Common messages used across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def user_message():
    """A simple user message."""
    return ChatMessage(role=MessageRole.USER, content="Hello, world!")


@pytest.fixture
def system_message():
    """A system message."""
    return ChatMessage(role=MessageRole.SYSTEM, content="You are a helpful assistant.")


@pytest.fixture
def conversation(system_message, user_message):
    """System + user conversation sequence."""
    return [system_message, user_message]


# ---------------------------------------------------------------------------
# Mock response factories
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_openai_response():
    """Factory for OpenAI-style chat completion responses."""

    def _make(content="Hello!", prompt_tokens=10, completion_tokens=5, total_tokens=None):
        message = MagicMock()
        message.content = content

        choice = MagicMock()
        choice.message = message

        usage = MagicMock()
        usage.prompt_tokens = prompt_tokens
        usage.completion_tokens = completion_tokens
        usage.total_tokens = total_tokens

        response = MagicMock()
        response.choices = [choice]
        response.usage = usage
        return response

    return _make


@pytest.fixture
def mock_openai_stream():
    """Factory for OpenAI-style streaming chunk sequences."""

    def _make(texts):
        chunks = []
        for text in texts:
            delta = MagicMock()
            delta.content = text
            choice = MagicMock()
            choice.delta = delta
            chunk = MagicMock()
            chunk.choices = [choice]
            chunks.append(chunk)
        # Trailing usage-only chunk
        final = MagicMock()
        final.choices = []
        chunks.append(final)
        return chunks

    return _make


@pytest.fixture
def json_response():
    """Factory for real httpx responses to a GET on ``url``."""

    def _make(payload=None, status_code=200, url="https://example.test/models", text=None):
        request = httpx.Request("GET", url)
        if text is not None:
            return httpx.Response(status_code, text=text, request=request)
        return httpx.Response(status_code, json=payload, request=request)

    return _make
