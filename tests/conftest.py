"""Shared fixtures: an in-memory MongoDB and canned agent outputs."""

from unittest.mock import AsyncMock, patch

import mongomock
import pytest

from config import Settings
from generation import store, task_queue
from generation.models import Citation, OutlineSection, ResearchOutput, SearchResult, WriterOutput

TEST_SETTINGS = Settings(
    mongodb_transactions=False,
    generation_dispatch="background",
    tavily_api_key="tvly-test",
    google_api_key="google-test",
    anthropic_api_key="anthropic-test",
    agent_timeout_seconds=5,
)


@pytest.fixture(autouse=True)
def test_settings():
    with patch("generation.orchestrator.settings", TEST_SETTINGS), \
            patch("blogs.settings", TEST_SETTINGS):
        yield TEST_SETTINGS


@pytest.fixture
def db():
    client = mongomock.MongoClient()
    database = client["blog_test"]
    store.ensure_indexes(database)
    task_queue.ensure_indexes(database)
    return database


def make_search_results(prefix: str = "source", count: int = 3):
    return [
        SearchResult(
            url=f"https://{prefix}{i}.example.com/article",
            title=f"{prefix.title()} {i}",
            content=f"Findings from {prefix} {i}.",
            score=round(0.9 - i * 0.1, 2),
        )
        for i in range(count)
    ]


def make_research(theme: str = "battery chemistry"):
    return ResearchOutput(
        insights=[f"{theme} costs are falling"],
        key_points=[f"{theme} adoption doubled since 2022"],
        themes=[theme],
        outline=[
            OutlineSection(section="Introduction", points=["Why it matters"]),
            OutlineSection(section="Conclusion", points=["What comes next"]),
        ],
    )


def make_writer_output(title: str = "Solid-State Batteries: What Changes Next", citations=None):
    if citations is None:
        citations = [
            Citation(title="Source 0", url="https://source0.example.com/article"),
            Citation(title="Source 1", url="https://source1.example.com/article"),
        ]
    return WriterOutput(
        title=title,
        content=f"# {title}\n\nA long-form article body.",
        excerpt="A short summary of the article.",
        citations=citations,
    )


class AgentMocks:
    def __init__(self):
        self.search = AsyncMock(return_value=make_search_results())
        self.research = AsyncMock(return_value=make_research())
        self.writer = AsyncMock(return_value=make_writer_output())


@pytest.fixture
def agents():
    mocks = AgentMocks()
    with patch("generation.orchestrator.search_agent", mocks.search), \
            patch("generation.orchestrator.research_agent", mocks.research), \
            patch("generation.orchestrator.writer_agent", mocks.writer):
        yield mocks
