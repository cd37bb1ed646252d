#!/usr/bin/env python3
"""
Blog generation API routes.

POST /generate creates the blog shell and its PENDING job, dispatches the
workflow and returns immediately; clients poll /{blog_id}/status.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field
from pymongo.database import Database

from config import settings
from database import get_db
from generation import store, task_queue
from generation.metrics import performance_summary
from generation.orchestrator import run_generation_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/blogs", tags=["blogs"])


# --- Request models ---

class GenerateRequest(BaseModel):
    topic: str = Field(min_length=5, max_length=200)
    writing_style_id: Optional[str] = None
    user_id: Optional[str] = None


# --- Helpers ---

def generation_helper(job: Optional[dict]) -> Optional[dict]:
    if not job:
        return None
    return {
        "status": job.get("status"),
        "current_step": job.get("current_step"),
        "search_complete": job.get("search_complete", False),
        "research_complete": job.get("research_complete", False),
        "writer_complete": job.get("writer_complete", False),
        "error": job.get("error"),
        "retry_count": job.get("retry_count", 0),
        "updated_at": job.get("updated_at"),
        "metrics": performance_summary(job),
    }


def blog_helper(doc: dict) -> dict:
    return {
        "id": doc["_id"],
        "title": doc.get("title"),
        "slug": doc.get("slug"),
        "content": doc.get("content", ""),
        "excerpt": doc.get("excerpt"),
        "status": doc.get("status"),
        "topic": doc.get("topic"),
        "user_id": doc.get("user_id"),
        "generation_error": doc.get("generation_error"),
        "created_at": doc.get("created_at"),
        "updated_at": doc.get("updated_at"),
    }


def source_helper(doc: dict) -> dict:
    return {"id": doc["_id"], "url": doc.get("url"), "title": doc.get("title")}


def _get_blog_or_404(db: Database, blog_id: str) -> dict:
    blog = store.get_blog(db, blog_id)
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")
    return blog


# --- Endpoints ---

@router.post("/generate")
async def generate_blog(
    body: GenerateRequest,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_db),
):
    """Start generating a blog post for a topic."""
    topic = body.topic.strip()
    if len(topic) < 5:
        raise HTTPException(status_code=422, detail="Topic must be at least 5 characters")

    try:
        blog = store.create_blog(
            db,
            topic,
            user_id=body.user_id,
            writing_style_id=body.writing_style_id,
            use_transaction=settings.mongodb_transactions,
        )
    except Exception as e:
        logger.exception("Failed to create blog for topic '%s'", topic)
        raise HTTPException(status_code=500, detail=str(e))

    blog_id = blog["_id"]
    if settings.generation_dispatch == "queue":
        try:
            task_queue.enqueue_generation(db, blog_id, topic, body.writing_style_id)
        except Exception as e:
            logger.exception("Failed to enqueue generation for blog %s", blog_id)
            # Nothing would ever run the PENDING job
            store.delete_blog(db, blog_id)
            raise HTTPException(status_code=500, detail=str(e))
    else:
        background_tasks.add_task(run_generation_task, db, blog_id, topic, body.writing_style_id)
    logger.info("Scheduled generation for blog %s (%s)", blog_id, settings.generation_dispatch)

    return {
        "blog_id": blog_id,
        "status": "generating",
        "message": "Blog generation started",
    }


@router.get("/{blog_id}/status")
async def get_generation_status(blog_id: str, db: Database = Depends(get_db)):
    """Poll generation progress for a blog."""
    blog = _get_blog_or_404(db, blog_id)
    return {
        "blog_id": blog_id,
        "blog_status": blog.get("status"),
        "generation": generation_helper(store.get_job(db, blog_id)),
    }


@router.get("/{blog_id}")
async def get_blog(blog_id: str, db: Database = Depends(get_db)):
    """Get a blog with its generation record and sources."""
    blog = _get_blog_or_404(db, blog_id)
    result = blog_helper(blog)
    result["generation"] = generation_helper(store.get_job(db, blog_id))
    result["sources"] = [source_helper(s) for s in store.get_citations(db, blog_id)]
    return result


@router.delete("/{blog_id}")
async def delete_blog(blog_id: str, db: Database = Depends(get_db)):
    """Delete a blog and everything generated for it."""
    if not store.delete_blog(db, blog_id):
        raise HTTPException(status_code=404, detail="Blog not found")
    return {"success": True, "message": "Blog deleted"}
