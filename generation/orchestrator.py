#!/usr/bin/env python3
"""
Blog Generation Orchestrator - drives one generation job to a terminal state.

PENDING -> SEARCHING -> RESEARCHING -> WRITING -> COMPLETED, with FAILED
reachable from any non-terminal state. Progress is written to the job after
every step so the status endpoint can report it while the job runs. The
orchestrator keeps no state of its own; everything lives in the store.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from config import settings
from generation import store
from generation.agents import research_agent, resolve_writing_style, search_agent, writer_agent
from generation.errors import GenerationNotClaimable
from generation.models import BlogStatus, GenerationStatus
from generation.text import generate_slug, strip_nulls_deep

logger = logging.getLogger(__name__)

STEP_SEARCHING = "Searching web sources..."
STEP_RESEARCHING = "Analyzing sources and extracting insights..."
STEP_WRITING = "Generating blog content..."
STEP_COMPLETE = "Blog generation complete"


def _elapsed_ms(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() * 1000)


async def _persist(func, *args, **kwargs):
    """Run a blocking store call off the event loop."""
    return await asyncio.to_thread(func, *args, **kwargs)


async def _start_stage(db, blog_id: str, status: GenerationStatus, step: str, stage: str) -> datetime:
    started_at = store.utcnow()
    await _persist(store.update_job, db, blog_id, {
        "status": status.value,
        "current_step": step,
        f"{stage}_started_at": started_at,
    })
    logger.info("[%s] %s", blog_id, step)
    return started_at


async def _complete_stage(db, blog_id: str, stage: str, started_at: datetime,
                          extra: Optional[Dict[str, Any]] = None):
    completed_at = store.utcnow()
    fields = {
        f"{stage}_complete": True,
        f"{stage}_completed_at": completed_at,
        f"{stage}_duration_ms": _elapsed_ms(started_at, completed_at),
    }
    if extra:
        fields.update(extra)
    await _persist(store.update_job, db, blog_id, fields)


async def run(db, blog_id: str, topic: str, writing_style_id: Optional[str] = None):
    """
    Run the full pipeline for a blog whose job is PENDING.

    Raises GenerationNotClaimable (without touching the job) if the job is not
    PENDING. Any other error marks the job FAILED and is re-raised.
    """
    workflow_start = store.utcnow()
    claimed = await _persist(store.claim_job, db, blog_id, {
        "status": GenerationStatus.SEARCHING.value,
        "current_step": STEP_SEARCHING,
        "search_started_at": workflow_start,
    })
    if not claimed:
        raise GenerationNotClaimable(f"Generation for blog {blog_id} is not pending")
    logger.info("[%s] Claimed generation for topic '%s'", blog_id, topic)

    try:
        # Search
        search_results = await search_agent(topic)
        await _complete_stage(db, blog_id, "search", workflow_start, {
            "search_data": strip_nulls_deep([r.model_dump() for r in search_results]),
        })

        # Research
        started_at = await _start_stage(db, blog_id, GenerationStatus.RESEARCHING, STEP_RESEARCHING, "research")
        research = await research_agent(topic, search_results)
        await _complete_stage(db, blog_id, "research", started_at, {
            "research_data": strip_nulls_deep(research.model_dump(by_alias=True)),
        })

        # Write
        started_at = await _start_stage(db, blog_id, GenerationStatus.WRITING, STEP_WRITING, "writer")
        style = await _persist(resolve_writing_style, db, writing_style_id)
        content = await writer_agent(topic, search_results, research, style)
        await _complete_stage(db, blog_id, "writer", started_at)

        # Finalize
        output = strip_nulls_deep(content.model_dump())
        completed_at = store.utcnow()
        await _persist(
            store.finalize,
            db,
            blog_id,
            {
                "title": output["title"],
                "slug": generate_slug(output["title"], blog_id),
                "content": output["content"],
                "excerpt": output["excerpt"],
                "status": BlogStatus.DRAFT.value,
                "generation_error": None,
            },
            output["citations"],
            {
                "status": GenerationStatus.COMPLETED.value,
                "current_step": STEP_COMPLETE,
                "completed_at": completed_at,
                "total_duration_ms": _elapsed_ms(workflow_start, completed_at),
            },
            use_transaction=settings.mongodb_transactions,
        )
        logger.info("[%s] %s (%d citations)", blog_id, STEP_COMPLETE, len(output["citations"]))

    except Exception as e:
        logger.exception("[%s] Generation workflow failed", blog_id)
        await _record_failure(db, blog_id, str(e) or "Unknown error")
        raise


async def _record_failure(db, blog_id: str, error: str):
    """
    Write the FAILED transition. A failure here is logged only, so the
    caller still sees the original pipeline error.
    """
    try:
        if await _persist(store.fail_job, db, blog_id, error):
            await _persist(store.mark_blog_failed, db, blog_id, error)
        else:
            logger.warning("[%s] Job already terminal, failure not recorded", blog_id)
    except Exception:
        logger.exception("[%s] Could not record generation failure", blog_id)


async def run_generation_task(db, blog_id: str, topic: str, writing_style_id: Optional[str] = None):
    """
    Entry point for fire-and-forget dispatch (FastAPI background task).
    The outcome is already recorded on the job, so errors are only logged here.
    """
    try:
        await run(db, blog_id, topic, writing_style_id)
    except Exception as e:
        logger.error("Generation task for blog %s ended with error: %s", blog_id, e)
