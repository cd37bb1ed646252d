#!/usr/bin/env python3
"""
Generation Worker - polls the generation queue and runs the orchestrator.
Run as a standalone process: python -m generation.worker

Failed generations are not retried; the job's retry_count and error are left
for a person to decide on a new generation. Entries left running by a worker
that died are failed once they go stale.
"""

import asyncio
import logging
import uuid

from generation import orchestrator, store, task_queue

logger = logging.getLogger(__name__)

WORKER_ID = f"worker-{uuid.uuid4().hex[:8]}"


async def execute_entry(db, entry: dict) -> bool:
    """Run the orchestrator for a claimed entry. Returns True on success."""
    entry_id = entry["_id"]
    blog_id = entry["blog_id"]
    try:
        await orchestrator.run(db, blog_id, entry["topic"], entry.get("writing_style_id"))
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error("[%s] Generation for blog %s failed: %s", WORKER_ID, blog_id, error_msg)
        await asyncio.to_thread(task_queue.mark_failed, db, entry_id, error_msg)
        return False

    await asyncio.to_thread(task_queue.mark_completed, db, entry_id)
    logger.info("[%s] Generation for blog %s completed", WORKER_ID, blog_id)
    return True


async def poll_once(db) -> bool:
    """Claim and execute at most one entry. Returns False when the queue is empty."""
    entry = await asyncio.to_thread(task_queue.claim_next, db, WORKER_ID)
    if not entry:
        return False
    logger.info("[%s] Claimed entry %s (blog=%s)", WORKER_ID, entry["_id"], entry["blog_id"])
    await execute_entry(db, entry)
    return True


def reap_stale_entries(db, stale_after_seconds: int) -> int:
    """
    Fail queue entries orphaned by a worker that died mid-run, along with
    their generation job and blog. Returns the number of entries reaped.
    """
    entries = task_queue.fail_stale_entries(db, stale_after_seconds)
    for entry in entries:
        blog_id = entry["blog_id"]
        logger.warning("[%s] Queue entry %s for blog %s is stale, failing it",
                       WORKER_ID, entry["_id"], blog_id)
        if store.fail_job(db, blog_id, task_queue.STALE_ERROR):
            store.mark_blog_failed(db, blog_id, task_queue.STALE_ERROR)
    return len(entries)


async def poll_and_execute(db, poll_interval: int, stale_after_seconds: int = 3600):
    """Main worker loop: poll for entries, claim, execute."""
    logger.info("[%s] Generation worker started, polling every %ss", WORKER_ID, poll_interval)
    store.ensure_indexes(db)
    task_queue.ensure_indexes(db)

    while True:
        try:
            await asyncio.to_thread(reap_stale_entries, db, stale_after_seconds)
            if not await poll_once(db):
                await asyncio.sleep(poll_interval)
        except asyncio.CancelledError:
            logger.info("[%s] Shutting down", WORKER_ID)
            raise
        except Exception:
            logger.exception("[%s] Poll error", WORKER_ID)
            await asyncio.sleep(poll_interval)


def main():
    from config import settings
    from database import db
    from logging_config import setup_logging

    setup_logging(settings.log_level)
    try:
        asyncio.run(poll_and_execute(
            db, settings.worker_poll_interval, settings.worker_stale_after_seconds,
        ))
    except KeyboardInterrupt:
        logger.info("[%s] Stopped", WORKER_ID)


if __name__ == "__main__":
    main()
