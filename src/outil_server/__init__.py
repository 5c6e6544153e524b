"""outil-server: Headless FastAPI server for local LLM tool calling via Ollama.

This package provides a REST API and SSE streaming interface for chat
sessions whose models call tools by writing directives into their output.
"""

from outil_server.app import create_app

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]
