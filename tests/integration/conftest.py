"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that ensure
proper test isolation and mocking for API endpoint tests.
"""

from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_ollama_client():
    """Mock OllamaClient for all integration tests.

    This fixture patches the OllamaClient class before the app is created,
    ensuring the lifespan uses our mock instead of creating a real client.
    """
    with patch("outil_server.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.check_connection.return_value = True
        mock_instance.host = "http://localhost:11434"

        mock_client_class.return_value = mock_instance

        yield mock_instance


@pytest.fixture
def script_ollama(mock_ollama_client):
    """Script the model's replies, one list of fragments per generation round.

    Returns a function taking the rounds; each call to chat_stream plays the
    next round and records the messages it was sent.
    """

    def _script(*rounds: list[str]) -> list[list[dict]]:
        remaining = list(rounds)
        sent: list[list[dict]] = []

        async def chat_stream(model, messages, options=None):
            sent.append(list(messages))
            fragments = remaining.pop(0)
            for fragment in fragments:
                yield {
                    "model": model,
                    "message": {"role": "assistant", "content": fragment},
                    "done": False,
                }
            yield {
                "model": model,
                "message": {"role": "assistant", "content": ""},
                "done": True,
                "eval_count": 12,
                "prompt_eval_count": 40,
            }

        mock_ollama_client.chat_stream = chat_stream
        return sent

    return _script
