"""Ollama client wrapper and integration layer.

All Ollama interactions are async and use streaming.
"""

from outil_server.ollama.client import OllamaClient

__all__ = ["OllamaClient"]
