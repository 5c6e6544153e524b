"""Reference capability providers.

Providers are the external collaborators the dispatcher calls. Each one is an
async callable taking the validated arguments model of its tool.
"""

import httpx

from outil_server.config import OutilServerSettings
from outil_server.tools.providers.search import SearchProvider
from outil_server.tools.providers.weather import WeatherProvider
from outil_server.tools.registry import CapabilityRegistry


def register_default_providers(
    registry: CapabilityRegistry,
    http_client: httpx.AsyncClient,
    settings: OutilServerSettings,
) -> None:
    """Register the built-in network-backed providers."""
    registry.register(
        "get_weather_data",
        WeatherProvider(
            http_client,
            geocoding_url=settings.weather_geocoding_url,
            forecast_url=settings.weather_forecast_url,
        ),
        timeout=settings.tool_timeout_seconds,
    )
    registry.register(
        "search_duckduckgo",
        SearchProvider(http_client, search_url=settings.search_url),
        timeout=settings.tool_timeout_seconds,
    )


__all__ = ["SearchProvider", "WeatherProvider", "register_default_providers"]
