"""
Shared helpers for the pipeline agents.

Every agent raises AgentError for anything that goes wrong (missing key,
provider error, timeout, malformed output). The orchestrator never receives
a half-parsed result.
"""

import asyncio
import json
import logging
import re
from typing import Any, Awaitable, Type, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


class AgentError(Exception):
    """Raised by an agent when its provider call or output validation fails."""


def require_key(value, env_name: str, agent_label: str) -> str:
    if not value:
        raise AgentError(f"{agent_label} failed: {env_name} is not set")
    return value


def parse_json_output(text: str, agent_label: str) -> Any:
    """
    Parse JSON from raw model text. Accepts plain JSON, ```json fenced blocks,
    or a JSON object embedded in surrounding prose.
    """
    if not text or not text.strip():
        raise AgentError(f"{agent_label} failed: empty response")

    candidate = text.strip()
    match = _JSON_FENCE_RE.search(candidate)
    if match:
        candidate = match.group(1).strip()

    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end <= start:
        raise AgentError(f"{agent_label} failed: response did not contain JSON")
    try:
        return json.loads(candidate[start:end + 1])
    except json.JSONDecodeError as e:
        raise AgentError(f"{agent_label} failed: could not parse JSON ({e.msg})") from e


def validate_output(model: Type[ModelT], data: Any, agent_label: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise AgentError(
            f"{agent_label} failed: malformed output ({e.error_count()} validation errors)"
        ) from e


async def call_provider(coro: Awaitable, timeout: int, agent_label: str) -> Any:
    """Await a provider call, converting timeouts and provider errors to AgentError."""
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise AgentError(f"{agent_label} failed: timed out after {timeout}s") from e
    except AgentError:
        raise
    except Exception as e:
        logger.warning("%s provider call failed: %s", agent_label, e)
        raise AgentError(f"{agent_label} failed: {e}") from e
