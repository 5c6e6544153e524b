"""CLI entry point for outil-server.

This module provides the command-line interface for starting the outil-server.
It can be invoked as `outil-server` (via the script entry point) or
`python -m outil_server`.
"""

import argparse
import sys

import uvicorn

from outil_server import __version__, create_app
from outil_server.config import OutilServerSettings


def main() -> None:
    """Main entry point for the outil-server CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application.
    """
    parser = argparse.ArgumentParser(
        prog="outil-server",
        description="Headless FastAPI server for local LLM tool calling via Ollama",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"outil-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via OUTIL_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via OUTIL_PORT)",
    )

    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via OUTIL_OLLAMA_HOST)",
    )

    parser.add_argument(
        "--default-model",
        type=str,
        default=None,
        help="Model for sessions created without one (default: qwen2.5:1.5b, can be set via OUTIL_DEFAULT_MODEL)",
    )

    parser.add_argument(
        "--max-tool-rounds",
        type=int,
        default=None,
        help="Tool calls processed per chat turn (default: 3, can be set via OUTIL_MAX_TOOL_ROUNDS)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Base directory for all data (default: ., can be set via OUTIL_DATA_DIR)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via OUTIL_LOG_LEVEL)",
    )

    args = parser.parse_args()

    # CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.ollama_host is not None:
        settings_kwargs["ollama_host"] = args.ollama_host
    if args.default_model is not None:
        settings_kwargs["default_model"] = args.default_model
    if args.max_tool_rounds is not None:
        settings_kwargs["max_tool_rounds"] = args.max_tool_rounds
    if args.data_dir is not None:
        settings_kwargs["data_dir"] = args.data_dir
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    settings = OutilServerSettings(**settings_kwargs)

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())
