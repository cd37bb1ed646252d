"""Search Agent - finds relevant web sources for a topic via Tavily."""

import logging
from typing import List

from tavily import AsyncTavilyClient

from config import settings
from generation.agents.base import AgentError, call_provider, require_key, validate_output
from generation.models import SearchResult

logger = logging.getLogger(__name__)

AGENT_LABEL = "Search agent"


async def search_agent(topic: str) -> List[SearchResult]:
    """
    Search the web for a topic. Results keep Tavily's ranking order; the full
    page content is preferred over the snippet when Tavily returns it.
    """
    api_key = require_key(settings.tavily_api_key, "TAVILY_API_KEY", AGENT_LABEL)
    client = AsyncTavilyClient(api_key=api_key)

    response = await call_provider(
        client.search(
            topic,
            search_depth="advanced",
            max_results=settings.search_max_results,
            include_answer=False,
            include_raw_content=True,
        ),
        settings.agent_timeout_seconds,
        AGENT_LABEL,
    )

    if not isinstance(response, dict) or not isinstance(response.get("results"), list):
        raise AgentError(f"{AGENT_LABEL} failed: unexpected response shape")

    results = []
    for item in response["results"]:
        if not isinstance(item, dict):
            raise AgentError(f"{AGENT_LABEL} failed: unexpected result entry")
        results.append(validate_output(SearchResult, {
            "url": item.get("url"),
            "title": item.get("title") or "",
            "content": item.get("raw_content") or item.get("content") or "",
            "score": item.get("score") or 0.0,
        }, AGENT_LABEL))

    logger.info("Search returned %d sources for '%s'", len(results), topic)
    return results
