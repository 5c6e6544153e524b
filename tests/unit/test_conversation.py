"""Unit tests for the conversation feedback loop."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from outil_server.services.conversation import (
    ConversationRunner,
    convert_messages_to_ollama_format,
)
from outil_server.sessions import (
    AssistantMessage,
    ChatSession,
    SystemMessage,
    ToolMessage,
    UserMessage,
)
from outil_server.tools import CapabilityRegistry, ToolCallProcessor
from outil_server.tools.definitions import WeatherArguments

WEATHER_CALL = '<tool_call>{"name": "get_weather_data", "arguments": {"location": "Paris"}}</tool_call>'


def make_stream(*rounds: list[str]):
    """Build a fake chat_stream playing one list of fragments per call."""
    remaining = list(rounds)
    calls: list[list[dict]] = []

    async def chat_stream(model, messages, options=None):
        calls.append(list(messages))
        for fragment in remaining.pop(0):
            yield {"message": {"role": "assistant", "content": fragment}, "done": False}
        yield {
            "message": {"role": "assistant", "content": ""},
            "done": True,
            "eval_count": 7,
            "prompt_eval_count": 30,
        }

    client = MagicMock()
    client.chat_stream = chat_stream
    return client, calls


@pytest.fixture
def weather_handler():
    return AsyncMock(return_value="Sunny, 21°C")


@pytest.fixture
def processor(weather_handler):
    registry = CapabilityRegistry()
    registry.register("get_weather_data", weather_handler)
    registry.freeze()
    return ToolCallProcessor.from_registry(registry)


@pytest.fixture
def session():
    session = ChatSession(session_id="abc123def0", model="qwen2.5:1.5b")
    session.add_message(UserMessage(content="Weather in Paris?", message_id="u1"))
    return session


async def collect(runner: ConversationRunner, session: ChatSession) -> list:
    return [event async for event in runner.run(session)]


@pytest.mark.asyncio
async def test_plain_answer_without_tools(processor, session):
    client, calls = make_stream(["Hello", " there!"])
    runner = ConversationRunner(client, processor)

    events = await collect(runner, session)

    assert [e.event for e in events] == ["content_delta", "content_delta", "message_complete"]
    assert runner.final_message.content == "Hello there!"
    assert runner.final_message.eval_count == 7
    assert runner.outcomes == []
    assert len(calls) == 1
    assert isinstance(session.messages[-1], AssistantMessage)


@pytest.mark.asyncio
async def test_tool_call_result_is_fed_back(processor, session, weather_handler):
    client, calls = make_stream(
        ["Let me check. ", WEATHER_CALL[:20], WEATHER_CALL[20:]],
        ["It is sunny in Paris."],
    )
    runner = ConversationRunner(client, processor)

    events = await collect(runner, session)

    names = [e.event for e in events]
    assert names == [
        "content_delta",
        "tool_call",
        "tool_result",
        "content_delta",
        "message_complete",
    ]
    weather_handler.assert_awaited_once_with(WeatherArguments(location="Paris"))

    tool_call = events[1].data
    assert tool_call.tool_name == "get_weather_data"
    assert tool_call.arguments == {"location": "Paris"}
    assert tool_call.wire_format == "tagged_block"

    # The second round saw the tool result as the last message
    assert len(calls) == 2
    assert calls[1][-1] == {
        "role": "tool",
        "content": "Sunny, 21°C",
        "tool_name": "get_weather_data",
    }
    assert calls[1][-2]["role"] == "assistant"
    assert calls[1][-2]["content"] == "Let me check. " + WEATHER_CALL

    assert [m.role for m in session.messages] == ["user", "assistant", "tool", "assistant"]
    assert events[-1].data.tool_calls_executed == 1


@pytest.mark.asyncio
async def test_generation_stops_at_close_marker(processor, session):
    client, calls = make_stream([WEATHER_CALL, "never generated"], ["Done."])
    runner = ConversationRunner(client, processor)

    events = await collect(runner, session)

    deltas = [e.data.content for e in events if e.event == "content_delta"]
    assert deltas == ["Done."]


@pytest.mark.asyncio
async def test_tool_error_is_fed_back_as_text(processor, session, weather_handler):
    client, calls = make_stream(
        ['<tool_call>{"name": "get_weather", "arguments": {}}</tool_call>'],
        ["Sorry, I could not do that."],
    )
    runner = ConversationRunner(client, processor)

    events = await collect(runner, session)

    result = next(e.data for e in events if e.event == "tool_result")
    assert result.ok is False
    assert result.error_code == "unknown_tool"
    assert result.content == "Error: Unknown tool: get_weather"
    assert calls[1][-1]["content"] == "Error: Unknown tool: get_weather"
    assert isinstance(session.messages[2], ToolMessage)
    assert session.messages[2].error_code == "unknown_tool"
    weather_handler.assert_not_awaited()


@pytest.mark.asyncio
async def test_round_cap_disables_tools_on_last_round(processor, session, weather_handler):
    client, calls = make_stream([WEATHER_CALL], [WEATHER_CALL])
    runner = ConversationRunner(client, processor, max_tool_rounds=1)

    events = await collect(runner, session)

    assert weather_handler.await_count == 1
    assert len(runner.outcomes) == 1
    # The directive in the capped round is passed through as text
    assert runner.final_message.content == WEATHER_CALL
    assert events[-1].event == "message_complete"


@pytest.mark.asyncio
async def test_unterminated_directive_flushed_at_stream_end(processor, session, weather_handler):
    client, calls = make_stream(
        ['<tool_call>{"name": "get_weather_data", "arguments": {"location": "Paris"}}'],
        ["Sunny."],
    )
    runner = ConversationRunner(client, processor)

    await collect(runner, session)

    weather_handler.assert_awaited_once()
    assert runner.final_message.content == "Sunny."


@pytest.mark.asyncio
async def test_stream_error_discards_partial_directive(processor, session, weather_handler):
    async def failing_stream(model, messages, options=None):
        yield {"message": {"content": '<tool_call>{"name": "get_weather_data"'}, "done": False}
        raise ConnectionError("Ollama went away")

    client = MagicMock()
    client.chat_stream = failing_stream
    runner = ConversationRunner(client, processor)

    with pytest.raises(ConnectionError):
        await collect(runner, session)

    assert processor.scanner.is_idle
    weather_handler.assert_not_awaited()


@pytest.mark.asyncio
async def test_closing_runner_early_resets_scanner(processor, session, weather_handler):
    client, _ = make_stream(['Checking <tool_call>{"name": "get_wea', 'ther_data"'])
    runner = ConversationRunner(client, processor)

    events = runner.run(session)
    first = await events.__anext__()
    assert first.data.content == "Checking "
    assert not processor.scanner.is_idle

    await events.aclose()

    assert processor.scanner.is_idle
    weather_handler.assert_not_awaited()


def test_convert_messages_to_ollama_format():
    messages = [
        SystemMessage(content="You are helpful."),
        UserMessage(content="Hi"),
        AssistantMessage(
            content=WEATHER_CALL,
            tool_calls=[{"function": {"name": "get_weather_data", "arguments": {}}}],
        ),
        ToolMessage(tool_name="get_weather_data", content="Sunny"),
    ]

    result = convert_messages_to_ollama_format(messages)

    assert result == [
        {"role": "system", "content": "You are helpful."},
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": WEATHER_CALL},
        {"role": "tool", "content": "Sunny", "tool_name": "get_weather_data"},
    ]
