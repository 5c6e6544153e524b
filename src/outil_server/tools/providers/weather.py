"""Weather capability backed by the Open-Meteo HTTP APIs.

The location name is geocoded first, then current conditions are fetched for
the resulting coordinates.
"""

import logging
from typing import Any

import httpx

from outil_server.tools.definitions import WeatherArguments
from outil_server.tools.errors import LocationNotFoundError

logger = logging.getLogger(__name__)

CURRENT_FIELDS = (
    "temperature_2m",
    "apparent_temperature",
    "relative_humidity_2m",
    "weather_code",
    "wind_speed_10m",
    "surface_pressure",
    "precipitation",
)

# WMO weather interpretation codes
WEATHER_CODES: dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


def format_weather(place: str, current: dict[str, Any]) -> str:
    """Format Open-Meteo current conditions as plain text."""
    condition = WEATHER_CODES.get(current.get("weather_code", -1), "Not available")
    return (
        f"Current Weather for {place}:\n"
        f"Temperature: {current.get('temperature_2m', 0.0):.1f}°C\n"
        f"Feels Like: {current.get('apparent_temperature', 0.0):.1f}°C\n"
        f"Condition: {condition}\n"
        f"Humidity: {current.get('relative_humidity_2m', 0):.0f}%\n"
        f"Wind Speed: {current.get('wind_speed_10m', 0.0):.1f} km/h\n"
        f"Pressure: {current.get('surface_pressure', 0.0):.0f} hPa\n"
        f"Precipitation: {current.get('precipitation', 0.0):.1f} mm"
    )


class WeatherProvider:
    """Handler for get_weather_data."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        geocoding_url: str,
        forecast_url: str,
    ) -> None:
        self.client = client
        self.geocoding_url = geocoding_url
        self.forecast_url = forecast_url

    async def __call__(self, arguments: WeatherArguments) -> str:
        location = arguments.location.strip()
        if not location:
            raise LocationNotFoundError(arguments.location)

        place = await self._geocode(location)
        response = await self.client.get(
            self.forecast_url,
            params={
                "latitude": place["latitude"],
                "longitude": place["longitude"],
                "current": ",".join(CURRENT_FIELDS),
            },
        )
        response.raise_for_status()
        current = response.json().get("current", {})

        label = ", ".join(
            part for part in (place.get("name"), place.get("country")) if part
        )
        logger.info(f"Fetched weather for {label}")
        return format_weather(label or location, current)

    async def _geocode(self, location: str) -> dict[str, Any]:
        response = await self.client.get(
            self.geocoding_url,
            params={"name": location, "count": 1, "format": "json"},
        )
        response.raise_for_status()
        results = response.json().get("results") or []
        if not results:
            raise LocationNotFoundError(location)
        return results[0]
