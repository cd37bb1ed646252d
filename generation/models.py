"""
Status enums and agent input/output models for the blog generation pipeline.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class BlogStatus(str, Enum):
    DRAFT = "DRAFT"
    GENERATING = "GENERATING"
    PUBLISHED = "PUBLISHED"


class GenerationStatus(str, Enum):
    PENDING = "PENDING"
    SEARCHING = "SEARCHING"
    RESEARCHING = "RESEARCHING"
    WRITING = "WRITING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


TERMINAL_STATUSES = (GenerationStatus.COMPLETED.value, GenerationStatus.FAILED.value)


# --- Agent contracts ---

class SearchResult(BaseModel):
    url: str
    title: str = ""
    content: str = ""
    score: float = 0.0


class OutlineSection(BaseModel):
    section: str
    points: List[str] = Field(default_factory=list)


class ResearchOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    insights: List[str] = Field(default_factory=list)
    key_points: List[str] = Field(default_factory=list, alias="keyPoints")
    themes: List[str] = Field(default_factory=list)
    outline: List[OutlineSection] = Field(default_factory=list)


class Citation(BaseModel):
    title: str = ""
    url: str


class WriterOutput(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    excerpt: str = ""
    citations: List[Citation] = Field(default_factory=list)
