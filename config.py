#!/usr/bin/env python3
"""
Application settings loaded from environment variables (.env supported).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    # MongoDB
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017/")
    mongodb_db_name: str = os.getenv("MONGODB_DB_NAME", "blog_db")
    # Multi-document transactions need a replica set; off for standalone servers
    mongodb_transactions: bool = _env_bool("MONGODB_TRANSACTIONS")

    # Agent providers
    tavily_api_key: Optional[str] = os.getenv("TAVILY_API_KEY")
    google_api_key: Optional[str] = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
    anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY")

    research_model: str = os.getenv("RESEARCH_MODEL", "gemini-2.5-pro")
    writer_model: str = os.getenv("WRITER_MODEL", "claude-sonnet-4-5")
    writer_max_tokens: int = int(os.getenv("WRITER_MAX_TOKENS", "8000"))
    writer_temperature: float = float(os.getenv("WRITER_TEMPERATURE", "0.6"))
    search_max_results: int = int(os.getenv("SEARCH_MAX_RESULTS", "10"))
    agent_timeout_seconds: int = int(os.getenv("AGENT_TIMEOUT_SECONDS", "300"))

    # "background" runs the workflow in-process after the response;
    # "queue" stores a queue entry for generation.worker to pick up
    generation_dispatch: str = os.getenv("GENERATION_DISPATCH", "background")
    worker_poll_interval: int = int(os.getenv("WORKER_POLL_INTERVAL", "5"))
    # Running queue entries older than this are treated as orphaned by a dead worker
    worker_stale_after_seconds: int = int(os.getenv("WORKER_STALE_AFTER_SECONDS", "3600"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
