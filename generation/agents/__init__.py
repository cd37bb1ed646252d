"""
Blog Generation Agents

Search -> Research -> Write. Each agent wraps one third-party API, validates
the response and raises AgentError on any failure.
"""

from generation.agents.base import AgentError
from generation.agents.research import research_agent
from generation.agents.search import search_agent
from generation.agents.styles import resolve_writing_style
from generation.agents.writer import writer_agent

__all__ = [
    "AgentError",
    "research_agent",
    "resolve_writing_style",
    "search_agent",
    "writer_agent",
]
