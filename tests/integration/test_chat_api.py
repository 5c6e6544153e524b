"""Integration tests for the non-streaming chat endpoint.

Covers plain replies, executed tool calls, tool errors fed back to the
model, and error responses.
"""

import pytest
from httpx import AsyncClient

WEATHER_CALL = (
    '<tool_call>{"name": "get_weather_data", "arguments": {"location": "Paris"}}</tool_call>'
)


async def create_session(client: AsyncClient, **body) -> str:
    response = await client.post("/api/v1/sessions", json=body)
    assert response.status_code == 201
    return response.json()["session_id"]


@pytest.mark.asyncio
async def test_chat_plain_reply(async_client: AsyncClient, script_ollama):
    session_id = await create_session(async_client)
    script_ollama(["Hello", " there!"])

    response = await async_client.post(
        f"/api/v1/chat/{session_id}", json={"message": "Hi!"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["session_id"] == session_id
    assert data["message"]["content"] == "Hello there!"
    assert data["message"]["eval_count"] == 12
    assert data["tool_calls_executed"] == []


@pytest.mark.asyncio
async def test_chat_executes_tool_call(async_client: AsyncClient, script_ollama):
    session_id = await create_session(async_client)
    sent = script_ollama(
        ["Let me check. ", WEATHER_CALL[:25], WEATHER_CALL[25:]],
        ["It is 18°C and partly cloudy in Paris."],
    )

    response = await async_client.post(
        f"/api/v1/chat/{session_id}", json={"message": "Weather in Paris?"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"]["content"] == "It is 18°C and partly cloudy in Paris."
    assert data["tool_calls_executed"] == [
        {
            "tool_name": "get_weather_data",
            "arguments": {"location": "Paris"},
            "ok": True,
            "content": (
                "Current Weather for Paris, France:\n"
                "Temperature: 18.0°C\nCondition: Partly cloudy"
            ),
            "error_code": None,
        }
    ]
    assert sent[1][-1]["role"] == "tool"
    assert sent[1][-1]["content"].startswith("Current Weather for Paris")

    detail = await async_client.get(f"/api/v1/sessions/{session_id}")
    roles = [m["role"] for m in detail.json()["messages"]]
    assert roles == ["system", "user", "assistant", "tool", "assistant"]
    assistant = detail.json()["messages"][2]
    assert assistant["tool_calls"] == [
        {"function": {"name": "get_weather_data", "arguments": {"location": "Paris"}}}
    ]


@pytest.mark.asyncio
async def test_chat_inline_directive(async_client: AsyncClient, script_ollama):
    session_id = await create_session(async_client)
    script_ollama(
        [
            '<|python_tag|>{"name": "search_duckduckgo", '
            '"parameters": {"query": "asyncio"}}<|eom_id|>'
        ],
        ["Here is what I found."],
    )

    response = await async_client.post(
        f"/api/v1/chat/{session_id}", json={"message": "What is asyncio?"}
    )

    executed = response.json()["tool_calls_executed"]
    assert executed[0]["tool_name"] == "search_duckduckgo"
    assert executed[0]["content"] == "Abstract:\nResults for asyncio"


@pytest.mark.asyncio
async def test_chat_empty_location_is_capability_failure(
    async_client: AsyncClient, script_ollama
):
    session_id = await create_session(async_client)
    sent = script_ollama(
        [
            '<tool_call>{"name":"get_w',
            'eather_data","arguments":{"location":""}}</tool_call>',
        ],
        ["Which city do you mean?"],
    )

    response = await async_client.post(
        f"/api/v1/chat/{session_id}", json={"message": "What's the weather?"}
    )

    executed = response.json()["tool_calls_executed"][0]
    assert executed["ok"] is False
    assert executed["error_code"] == "capability_failure"
    assert executed["content"] == (
        "Error: Tool 'get_weather_data' execution failed: "
        "Location not found: no location was given"
    )
    assert sent[1][-1]["content"] == executed["content"]
    assert response.json()["message"]["content"] == "Which city do you mean?"


@pytest.mark.asyncio
async def test_chat_parse_error_then_recovery(async_client: AsyncClient, script_ollama):
    session_id = await create_session(async_client)
    script_ollama(
        ["<tool_call>{invalid json}</tool_call>"],
        [WEATHER_CALL],
        ["Sunny enough."],
    )

    response = await async_client.post(
        f"/api/v1/chat/{session_id}", json={"message": "Weather in Paris?"}
    )

    executed = response.json()["tool_calls_executed"]
    assert [e["error_code"] for e in executed] == ["parse_error", None]
    assert executed[0]["arguments"] is None
    assert executed[1]["ok"] is True


@pytest.mark.asyncio
async def test_chat_session_not_found(async_client: AsyncClient):
    response = await async_client.post(
        "/api/v1/chat/nonexistent", json={"message": "Hi"}
    )

    assert response.status_code == 404
    assert response.json()["detail"]["error"]["code"] == "session_not_found"


@pytest.mark.asyncio
async def test_chat_empty_history(async_client: AsyncClient, script_ollama):
    session_id = await create_session(async_client, system_prompt="")

    response = await async_client.post(
        f"/api/v1/chat/{session_id}", json={"message": None}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "empty_history"


@pytest.mark.asyncio
async def test_chat_ollama_error(async_client: AsyncClient, mock_ollama_client):
    session_id = await create_session(async_client)

    async def failing_stream(model, messages, options=None):
        raise ConnectionError("Ollama is down")
        yield  # pragma: no cover

    mock_ollama_client.chat_stream = failing_stream

    response = await async_client.post(
        f"/api/v1/chat/{session_id}", json={"message": "Hi"}
    )

    assert response.status_code == 502
    assert response.json()["detail"]["error"]["code"] == "ollama_error"

    # Nothing from the failed turn was persisted
    detail = await async_client.get(f"/api/v1/sessions/{session_id}")
    assert detail.json()["message_count"] == 1
