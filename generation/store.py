#!/usr/bin/env python3
"""
Generation Record Store - blogs, their generation jobs and citation sources.

Collections:
- blogs             the content item being produced
- blog_generations  one job per blog (keyed by blog_id), written only by the orchestrator
- blog_sources      citations attached to a blog when generation completes

Every write is acknowledged before the function returns, so a poller reading
the job right after a call sees the new state.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pymongo import ASCENDING, ReturnDocument

from generation.errors import BlogNotFound, GenerationNotFound
from generation.models import BlogStatus, GenerationStatus, TERMINAL_STATUSES
from generation.text import draft_slug

INITIAL_STEP = "Initializing..."
FAILED_STEP = "Generation failed"


def utcnow() -> datetime:
    """Naive UTC timestamp, the form pymongo returns datetimes in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _session_kwargs(session) -> dict:
    return {"session": session} if session is not None else {}


def _writable_job_filter(blog_id: str) -> dict:
    """Matches the blog's job only while it has not reached a terminal state."""
    return {"blog_id": blog_id, "status": {"$nin": list(TERMINAL_STATUSES)}}


def ensure_indexes(db):
    db.blogs.create_index("slug", unique=True)
    db.blogs.create_index("user_id")
    db.blog_generations.create_index("blog_id", unique=True)
    db.blog_generations.create_index("status")
    db.blog_sources.create_index("blog_id")


def run_atomically(db, callback: Callable, use_transaction: bool = False):
    """
    Run callback(session) inside a multi-document transaction when enabled,
    otherwise call it directly with session=None (writes are then sequential).
    """
    if not use_transaction:
        return callback(None)
    with db.client.start_session() as session:
        return session.with_transaction(callback)


# --- Creation ---

def create_job(db, blog_id: str, session=None) -> dict:
    """Create the PENDING generation job for a blog."""
    now = utcnow()
    job_doc = {
        "_id": uuid.uuid4().hex,
        "blog_id": blog_id,
        "status": GenerationStatus.PENDING.value,
        "current_step": INITIAL_STEP,
        "search_complete": False,
        "research_complete": False,
        "writer_complete": False,
        "search_data": None,
        "research_data": None,
        "error": None,
        "retry_count": 0,
        "created_at": now,
        "updated_at": now,
    }
    db.blog_generations.insert_one(job_doc, **_session_kwargs(session))
    return job_doc


def create_blog(
    db,
    topic: str,
    user_id: Optional[str] = None,
    writing_style_id: Optional[str] = None,
    use_transaction: bool = False,
) -> dict:
    """
    Create the empty blog shell (status GENERATING) together with its PENDING job.
    Returns the blog document.
    """
    now = utcnow()
    blog_id = str(uuid.uuid4())
    blog_doc = {
        "_id": blog_id,
        "title": f"Draft: {topic}",
        "slug": draft_slug(topic, blog_id),
        "content": "",
        "excerpt": None,
        "status": BlogStatus.GENERATING.value,
        "topic": topic,
        "user_id": user_id,
        "writing_style_id": writing_style_id,
        "generation_error": None,
        "created_at": now,
        "updated_at": now,
    }

    def _insert(session):
        db.blogs.insert_one(blog_doc, **_session_kwargs(session))
        create_job(db, blog_id, session=session)

    if use_transaction:
        run_atomically(db, _insert, use_transaction=True)
        return blog_doc

    db.blogs.insert_one(blog_doc)
    try:
        create_job(db, blog_id)
    except Exception:
        # Never leave a GENERATING blog without a job
        db.blogs.delete_one({"_id": blog_id})
        raise
    return blog_doc


# --- Job transitions ---

def claim_job(db, blog_id: str, fields: Dict[str, Any]) -> Optional[dict]:
    """
    Atomically move a job out of PENDING. Only one caller can win; everyone
    else gets None and must leave the job alone.
    """
    update = dict(fields)
    update["updated_at"] = utcnow()
    return db.blog_generations.find_one_and_update(
        {"blog_id": blog_id, "status": GenerationStatus.PENDING.value},
        {"$set": update},
        return_document=ReturnDocument.AFTER,
    )


def update_job(db, blog_id: str, fields: Dict[str, Any], session=None):
    """
    Merge fields into a non-terminal job and refresh updated_at.
    Raises GenerationNotFound if the job is missing or already terminal.
    """
    update = dict(fields)
    update["updated_at"] = utcnow()
    result = db.blog_generations.update_one(
        _writable_job_filter(blog_id),
        {"$set": update},
        **_session_kwargs(session),
    )
    if result.matched_count == 0:
        raise GenerationNotFound(f"No active generation job for blog {blog_id}")


def fail_job(db, blog_id: str, error: str) -> bool:
    """
    Move a job to FAILED, record the error and bump the retry counter.
    Returns False if the job was already terminal (nothing written).
    """
    result = db.blog_generations.update_one(
        _writable_job_filter(blog_id),
        {
            "$set": {
                "status": GenerationStatus.FAILED.value,
                "current_step": FAILED_STEP,
                "error": error,
                "updated_at": utcnow(),
            },
            "$inc": {"retry_count": 1},
        },
    )
    return result.matched_count > 0


def mark_blog_failed(db, blog_id: str, error: str):
    """Take a blog out of GENERATING after its job failed."""
    db.blogs.update_one(
        {"_id": blog_id, "status": BlogStatus.GENERATING.value},
        {"$set": {
            "status": BlogStatus.DRAFT.value,
            "generation_error": error,
            "updated_at": utcnow(),
        }},
    )


def finalize(
    db,
    blog_id: str,
    blog_fields: Dict[str, Any],
    citations: List[Dict[str, Any]],
    job_fields: Dict[str, Any],
    use_transaction: bool = False,
):
    """
    Commit generated content: update the blog, insert its citations (skipped
    when empty) and complete the job. The job write is always last, so without
    a transaction a crash in between leaves the job non-terminal rather than
    COMPLETED with missing content.
    """

    def _apply(session):
        now = utcnow()
        kwargs = _session_kwargs(session)
        result = db.blogs.update_one(
            {"_id": blog_id},
            {"$set": {**blog_fields, "updated_at": now}},
            **kwargs,
        )
        if result.matched_count == 0:
            raise BlogNotFound(f"Blog {blog_id} not found")

        if citations:
            db.blog_sources.insert_many(
                [
                    {
                        "_id": uuid.uuid4().hex,
                        "blog_id": blog_id,
                        "url": citation["url"],
                        "title": citation.get("title", ""),
                        "created_at": now,
                    }
                    for citation in citations
                ],
                **kwargs,
            )

        update_job(db, blog_id, job_fields, session=session)

    run_atomically(db, _apply, use_transaction=use_transaction)


# --- Queries ---

def get_job(db, blog_id: str) -> Optional[dict]:
    return db.blog_generations.find_one({"blog_id": blog_id})


def get_blog(db, blog_id: str) -> Optional[dict]:
    return db.blogs.find_one({"_id": blog_id})


def get_citations(db, blog_id: str) -> List[dict]:
    return list(db.blog_sources.find({"blog_id": blog_id}).sort("created_at", ASCENDING))


def delete_blog(db, blog_id: str) -> bool:
    """Delete a blog together with its generation job, sources and queue entry."""
    result = db.blogs.delete_one({"_id": blog_id})
    if result.deleted_count == 0:
        return False
    db.blog_generations.delete_many({"blog_id": blog_id})
    db.blog_sources.delete_many({"blog_id": blog_id})
    db.generation_queue.delete_many({"blog_id": blog_id})
    return True
