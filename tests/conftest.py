"""Pytest configuration and shared fixtures for outil-server tests.

This module provides common fixtures used across all test modules,
including test app creation, a stub capability registry, and async
client setup.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from outil_server import create_app
from outil_server.config import OutilServerSettings
from outil_server.tools import CapabilityRegistry, LocationNotFoundError
from outil_server.tools.definitions import SearchArguments, WeatherArguments

KNOWN_WEATHER = {
    "paris": "Current Weather for Paris, France:\nTemperature: 18.0°C\nCondition: Partly cloudy",
    "new delhi": "Current Weather for New Delhi, India:\nTemperature: 31.0°C\nCondition: Clear sky",
}


async def stub_weather(arguments: WeatherArguments) -> str:
    """Weather handler answering from a fixed table."""
    try:
        return KNOWN_WEATHER[arguments.location.strip().lower()]
    except KeyError:
        raise LocationNotFoundError(arguments.location)


async def stub_search(arguments: SearchArguments) -> str:
    return f"Abstract:\nResults for {arguments.query}"


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings with isolated temporary directories.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.

    Returns:
        OutilServerSettings: Settings instance configured for testing.
    """
    return OutilServerSettings(
        host="127.0.0.1",
        port=8000,
        ollama_host="http://localhost:11434",
        default_model="qwen2.5:1.5b",
        data_dir=str(tmp_path),
        sessions_dir="chat_sessions",
        max_tool_rounds=3,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def stub_registry():
    """Registry with network-free weather and search handlers."""
    registry = CapabilityRegistry()
    registry.register("get_weather_data", stub_weather)
    registry.register("search_duckduckgo", stub_search)
    return registry


@pytest.fixture
def test_app(test_settings, stub_registry):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.
        stub_registry: Capability registry used instead of the network providers.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings, registry=stub_registry)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
