"""Writer Agent - drafts the blog post with citations using Claude."""

import json
import logging
from typing import Any, Dict, List, Optional

import anthropic

from config import settings
from generation.agents.base import AgentError, call_provider, parse_json_output, require_key, validate_output
from generation.agents.styles import DEFAULT_STYLE
from generation.models import ResearchOutput, SearchResult, WriterOutput

logger = logging.getLogger(__name__)

AGENT_LABEL = "Writer agent"


def build_writer_prompt(
    topic: str,
    search_results: List[SearchResult],
    research: ResearchOutput,
    style: Dict[str, Any],
) -> str:
    sources = "\n".join(
        f"[{i}] {r.title} - {r.url}" for i, r in enumerate(search_results, start=1)
    )
    research_json = json.dumps(research.model_dump(by_alias=True), indent=2)
    return f"""Strictly follow the provided style instructions.

STYLE SNAPSHOT:
{style.get("micro_prompt") or "Follow the system style guidance."}

TOPIC:
{topic}

RESEARCH INSIGHTS:
{research_json}

AVAILABLE SOURCES FOR CITATIONS:
{sources}

Write a 5-8 minute markdown article built on the research outline. Cite facts
inline as [Source Title](url) and only cite the sources listed above.

OUTPUT FORMAT (JSON only, no markdown code blocks or other text):
{{
  "title": "Blog title",
  "content": "Full markdown content with inline citations",
  "excerpt": "2-3 sentence summary",
  "citations": [{{"title": "Source title", "url": "https://..."}}]
}}"""


async def writer_agent(
    topic: str,
    search_results: List[SearchResult],
    research: ResearchOutput,
    style: Optional[Dict[str, Any]] = None,
) -> WriterOutput:
    api_key = require_key(settings.anthropic_api_key, "ANTHROPIC_API_KEY", AGENT_LABEL)
    style = style or DEFAULT_STYLE
    client = anthropic.AsyncAnthropic(api_key=api_key)

    message = await call_provider(
        client.messages.create(
            model=settings.writer_model,
            max_tokens=settings.writer_max_tokens,
            temperature=settings.writer_temperature,
            system=style["system_prompt"],
            messages=[{"role": "user", "content": build_writer_prompt(topic, search_results, research, style)}],
        ),
        settings.agent_timeout_seconds,
        AGENT_LABEL,
    )

    if not message.content or message.content[0].type != "text":
        raise AgentError(f"{AGENT_LABEL} failed: unexpected response type from Claude")

    data = parse_json_output(message.content[0].text, AGENT_LABEL)
    output = validate_output(WriterOutput, data, AGENT_LABEL)
    logger.info("Writer produced '%s' with %d citations", output.title, len(output.citations))
    return output
