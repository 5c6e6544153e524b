"""Configuration module for outil-server using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OutilServerSettings(BaseSettings):
    """Main configuration settings for outil-server.

    All settings can be overridden via environment variables with the OUTIL_ prefix.
    For example, OUTIL_OLLAMA_HOST will override the ollama_host setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Ollama
    ollama_host: str = "http://localhost:11434"
    default_model: str = "qwen2.5:1.5b"

    # Data directories (relative to data_dir)
    data_dir: str = "."
    sessions_dir: str = "chat_sessions"

    # Tool calling
    max_tool_rounds: int = 3
    tool_timeout_seconds: float | None = 30.0
    payload_repair_enabled: bool = False

    # Capability providers
    http_timeout_seconds: float = 10.0
    weather_geocoding_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    weather_forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    search_url: str = "https://api.duckduckgo.com/"

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="OUTIL_")

    @property
    def resolved_sessions_dir(self) -> Path:
        """Get the full path to the sessions directory."""
        return Path(self.data_dir) / self.sessions_dir
