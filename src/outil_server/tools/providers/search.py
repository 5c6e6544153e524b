"""Web search capability backed by the DuckDuckGo Instant Answer API."""

import logging
from typing import Any

import httpx

from outil_server.tools.definitions import SearchArguments
from outil_server.tools.errors import CapabilityError

logger = logging.getLogger(__name__)


class EmptyQueryError(CapabilityError):
    def __init__(self) -> None:
        super().__init__("Search query is empty")


def _topic_texts(topics: list[dict[str, Any]]) -> list[str]:
    # Grouped topics nest their entries under "Topics"
    texts: list[str] = []
    for topic in topics:
        if "Topics" in topic:
            texts.extend(_topic_texts(topic["Topics"]))
        elif topic.get("Text"):
            texts.append(topic["Text"])
    return texts


def format_search(data: dict[str, Any], max_topics: int = 3) -> str:
    """Format an Instant Answer response as plain text."""
    sections: list[str] = []

    if data.get("AbstractText"):
        sections.append(f"Abstract:\n{data['AbstractText']}")
    elif data.get("Answer"):
        sections.append(f"Answer:\n{data['Answer']}")

    topics = _topic_texts(data.get("RelatedTopics") or [])[:max_topics]
    if topics:
        sections.append("Related Topics:\n" + "\n".join(f"- {t}" for t in topics))

    if not sections:
        return "No results found."
    return "\n\n".join(sections)


class SearchProvider:
    """Handler for search_duckduckgo."""

    def __init__(self, client: httpx.AsyncClient, search_url: str) -> None:
        self.client = client
        self.search_url = search_url

    async def __call__(self, arguments: SearchArguments) -> str:
        query = arguments.query.strip()
        if not query:
            raise EmptyQueryError()

        response = await self.client.get(
            self.search_url,
            params={
                "q": query,
                "format": "json",
                "no_html": 1,
                "skip_disambig": 1,
            },
        )
        response.raise_for_status()
        logger.info(f"Search completed for query: {query}")
        return format_search(response.json())
