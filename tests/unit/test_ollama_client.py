"""Unit tests for the OllamaClient wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from outil_server.ollama import OllamaClient


@pytest.fixture
def mock_ollama_async_client():
    """Create a mock ollama.AsyncClient."""
    with patch("outil_server.ollama.client.ollama.AsyncClient") as mock_class:
        mock_instance = AsyncMock()
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def ollama_client(mock_ollama_async_client):
    """Create an OllamaClient with mocked AsyncClient."""
    return OllamaClient(host="http://localhost:11434")


async def _chunks(*items):
    for item in items:
        yield item


@pytest.mark.asyncio
async def test_check_connection_success(ollama_client, mock_ollama_async_client):
    mock_ollama_async_client.list.return_value = {"models": []}

    assert await ollama_client.check_connection() is True
    mock_ollama_async_client.list.assert_called_once()


@pytest.mark.asyncio
async def test_check_connection_failure(ollama_client, mock_ollama_async_client):
    """Test connection check when Ollama is unreachable."""
    mock_ollama_async_client.list.side_effect = Exception("Connection refused")

    assert await ollama_client.check_connection() is False


@pytest.mark.asyncio
async def test_chat_stream_yields_dicts(ollama_client, mock_ollama_async_client):
    """Chunks are converted to plain dicts whatever the SDK returns."""
    model_chunk = MagicMock()
    model_chunk.model_dump.return_value = {
        "message": {"role": "assistant", "content": "Hi"},
        "done": False,
    }
    dict_chunk = {"message": {"role": "assistant", "content": ""}, "done": True}
    mock_ollama_async_client.chat.return_value = _chunks(model_chunk, dict_chunk)

    messages = [{"role": "user", "content": "Hello"}]
    result = [
        chunk
        async for chunk in ollama_client.chat_stream(model="qwen2.5:1.5b", messages=messages)
    ]

    assert result == [
        {"message": {"role": "assistant", "content": "Hi"}, "done": False},
        dict_chunk,
    ]
    mock_ollama_async_client.chat.assert_awaited_once_with(
        model="qwen2.5:1.5b", messages=messages, stream=True, options=None
    )


@pytest.mark.asyncio
async def test_chat_stream_does_not_send_tools(ollama_client, mock_ollama_async_client):
    mock_ollama_async_client.chat.return_value = _chunks({"done": True})

    async for _ in ollama_client.chat_stream(model="m", messages=[]):
        pass

    assert "tools" not in mock_ollama_async_client.chat.await_args.kwargs


@pytest.mark.asyncio
async def test_chat_stream_propagates_errors(ollama_client, mock_ollama_async_client):
    mock_ollama_async_client.chat.side_effect = Exception("model not found")

    with pytest.raises(Exception, match="model not found"):
        async for _ in ollama_client.chat_stream(model="missing", messages=[]):
            pass


@pytest.mark.asyncio
async def test_close(ollama_client):
    """Test that close method can be called without errors."""
    await ollama_client.close()
