"""Research Agent - synthesizes search results into insights and an outline using Gemini."""

import logging
from typing import List

import google.generativeai as genai

from config import settings
from generation.agents.base import AgentError, call_provider, parse_json_output, require_key, validate_output
from generation.models import ResearchOutput, SearchResult

logger = logging.getLogger(__name__)

AGENT_LABEL = "Research agent"
SOURCE_CONTENT_CHARS = 1000


def build_research_prompt(topic: str, results: List[SearchResult]) -> str:
    sources = "\n".join(
        f"Source {i}: {r.title}\n"
        f"URL: {r.url}\n"
        f"Relevance Score: {r.score}\n"
        f"Content: {r.content[:SOURCE_CONTENT_CHARS]}...\n"
        f"---"
        for i, r in enumerate(results, start=1)
    )
    return f"""Analyze the following search results about "{topic}" and provide structured research output.

SEARCH RESULTS:
{sources}

TASK:
Extract and synthesize 3-5 key insights, important facts and statistics,
the main themes across sources, and a content outline with sections and key points.

OUTPUT FORMAT (JSON only, no other text):
{{
  "insights": ["..."],
  "keyPoints": ["..."],
  "themes": ["..."],
  "outline": [{{"section": "Introduction", "points": ["..."]}}]
}}"""


async def research_agent(topic: str, search_results: List[SearchResult]) -> ResearchOutput:
    api_key = require_key(settings.google_api_key, "GOOGLE_API_KEY", AGENT_LABEL)
    genai.configure(api_key=api_key)
    model = genai.GenerativeModel(
        settings.research_model,
        generation_config=genai.types.GenerationConfig(
            response_mime_type="application/json",
        ),
    )

    prompt = build_research_prompt(topic, search_results)
    response = await call_provider(
        model.generate_content_async(prompt),
        settings.agent_timeout_seconds,
        AGENT_LABEL,
    )

    try:
        text = response.text
    except ValueError as e:
        # Gemini raises when the candidate was blocked or is empty
        raise AgentError(f"{AGENT_LABEL} failed: {e}") from e

    data = parse_json_output(text, AGENT_LABEL)
    research = validate_output(ResearchOutput, data, AGENT_LABEL)
    logger.info(
        "Research produced %d insights and %d outline sections for '%s'",
        len(research.insights), len(research.outline), topic,
    )
    return research
