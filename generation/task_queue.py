#!/usr/bin/env python3
"""
Generation queue - durable submission of generation runs, keyed by blog id.

The API inserts an entry; generation.worker claims entries atomically and
runs the orchestrator for them.
"""

import uuid
from datetime import timedelta
from typing import List, Optional

from pymongo import ASCENDING, ReturnDocument

from generation.store import utcnow

STALE_ERROR = "Worker stopped before the generation finished"


def ensure_indexes(db):
    db.generation_queue.create_index("blog_id", unique=True)
    db.generation_queue.create_index([("status", ASCENDING), ("run_after", ASCENDING)])


def enqueue_generation(
    db,
    blog_id: str,
    topic: str,
    writing_style_id: Optional[str] = None,
    delay_seconds: int = 0,
) -> str:
    """Create a queued entry for the worker to pick up. Returns the entry ID."""
    now = utcnow()
    entry = {
        "_id": uuid.uuid4().hex,
        "blog_id": blog_id,
        "topic": topic,
        "writing_style_id": writing_style_id,
        "status": "queued",
        "run_after": now + timedelta(seconds=delay_seconds),
        "claimed_by": None,
        "created_at": now,
        "started_at": None,
        "completed_at": None,
        "error": None,
    }
    db.generation_queue.insert_one(entry)
    return entry["_id"]


def claim_next(db, worker_id: str) -> Optional[dict]:
    """Claim the oldest runnable entry using atomic find_one_and_update."""
    now = utcnow()
    return db.generation_queue.find_one_and_update(
        {"status": "queued", "run_after": {"$lte": now}},
        {"$set": {"status": "running", "claimed_by": worker_id, "started_at": now}},
        sort=[("run_after", ASCENDING)],
        return_document=ReturnDocument.AFTER,
    )


def mark_completed(db, entry_id: str):
    db.generation_queue.update_one(
        {"_id": entry_id},
        {"$set": {"status": "completed", "completed_at": utcnow()}},
    )


def mark_failed(db, entry_id: str, error: str):
    db.generation_queue.update_one(
        {"_id": entry_id},
        {"$set": {"status": "failed", "error": error, "completed_at": utcnow()}},
    )


def fail_stale_entries(db, stale_after_seconds: int) -> List[dict]:
    """
    Fail running entries started more than stale_after_seconds ago.
    Each entry is flipped with its own find_one_and_update so two workers
    never both report the same one. Returns the entries that were failed.
    """
    cutoff = utcnow() - timedelta(seconds=stale_after_seconds)
    failed = []
    while True:
        entry = db.generation_queue.find_one_and_update(
            {"status": "running", "started_at": {"$lte": cutoff}},
            {"$set": {
                "status": "failed",
                "error": STALE_ERROR,
                "completed_at": utcnow(),
            }},
            return_document=ReturnDocument.AFTER,
        )
        if not entry:
            return failed
        failed.append(entry)


def get_entries(db, blog_id: str) -> List[dict]:
    return list(db.generation_queue.find({"blog_id": blog_id}))
