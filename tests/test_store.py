"""Tests for the generation record store."""

from unittest.mock import MagicMock, patch

import pytest

from generation import store, task_queue
from generation.errors import BlogNotFound, GenerationNotFound


@pytest.fixture
def blog(db):
    return store.create_blog(db, "Edge computing in retail", user_id="user-1")


def test_create_blog_creates_shell_and_pending_job(db, blog):
    saved = store.get_blog(db, blog["_id"])
    assert saved["status"] == "GENERATING"
    assert saved["title"] == "Draft: Edge computing in retail"
    assert saved["content"] == ""
    assert saved["slug"].startswith("draft-edge-computing-in-retail-")

    job = store.get_job(db, blog["_id"])
    assert job["status"] == "PENDING"
    assert job["current_step"] == "Initializing..."
    assert job["search_complete"] is False
    assert job["research_complete"] is False
    assert job["writer_complete"] is False
    assert job["error"] is None
    assert job["retry_count"] == 0


def test_blogs_get_distinct_ids(db):
    first = store.create_blog(db, "Same topic twice")
    second = store.create_blog(db, "Same topic twice")
    assert first["_id"] != second["_id"]
    assert first["slug"] != second["slug"]


def test_claim_only_succeeds_once(db, blog):
    fields = {"status": "SEARCHING", "current_step": "Searching web sources..."}
    claimed = store.claim_job(db, blog["_id"], fields)
    assert claimed["status"] == "SEARCHING"
    assert store.claim_job(db, blog["_id"], fields) is None


def test_update_job_merges_and_refreshes_updated_at(db, blog):
    created = store.get_job(db, blog["_id"])

    store.update_job(db, blog["_id"], {"status": "SEARCHING", "search_complete": True})

    job = store.get_job(db, blog["_id"])
    assert job["status"] == "SEARCHING"
    assert job["search_complete"] is True
    assert job["research_complete"] is False
    assert job["updated_at"] >= created["updated_at"]


def test_update_job_rejects_unknown_blog(db):
    with pytest.raises(GenerationNotFound):
        store.update_job(db, "missing", {"status": "SEARCHING"})


def test_terminal_job_is_not_written(db, blog):
    assert store.fail_job(db, blog["_id"], "boom") is True

    with pytest.raises(GenerationNotFound):
        store.update_job(db, blog["_id"], {"status": "WRITING"})
    assert store.fail_job(db, blog["_id"], "again") is False

    job = store.get_job(db, blog["_id"])
    assert job["status"] == "FAILED"
    assert job["error"] == "boom"
    assert job["retry_count"] == 1


def test_mark_blog_failed_only_touches_generating_blogs(db, blog):
    store.mark_blog_failed(db, blog["_id"], "boom")
    saved = store.get_blog(db, blog["_id"])
    assert saved["status"] == "DRAFT"
    assert saved["generation_error"] == "boom"

    db.blogs.update_one({"_id": blog["_id"]}, {"$set": {"status": "PUBLISHED"}})
    store.mark_blog_failed(db, blog["_id"], "later")
    assert store.get_blog(db, blog["_id"])["status"] == "PUBLISHED"


def test_finalize_writes_blog_sources_and_job(db, blog):
    store.finalize(
        db,
        blog["_id"],
        {"title": "Edge Retail", "content": "Body", "status": "DRAFT"},
        [{"title": "One", "url": "https://one.example.com"}, {"url": "https://two.example.com"}],
        {"status": "COMPLETED", "current_step": "Blog generation complete"},
    )

    assert store.get_blog(db, blog["_id"])["title"] == "Edge Retail"
    sources = store.get_citations(db, blog["_id"])
    assert [s["url"] for s in sources] == ["https://one.example.com", "https://two.example.com"]
    assert sources[1]["title"] == ""
    assert store.get_job(db, blog["_id"])["status"] == "COMPLETED"


def test_finalize_without_citations(db, blog):
    store.finalize(db, blog["_id"], {"content": "Body"}, [], {"status": "COMPLETED"})

    assert store.get_citations(db, blog["_id"]) == []
    assert store.get_job(db, blog["_id"])["status"] == "COMPLETED"


def test_finalize_missing_blog_leaves_job_open(db, blog):
    db.blogs.delete_one({"_id": blog["_id"]})

    with pytest.raises(BlogNotFound):
        store.finalize(db, blog["_id"], {"content": "Body"}, [{"url": "https://x.example.com"}],
                       {"status": "COMPLETED"})

    assert store.get_job(db, blog["_id"])["status"] == "PENDING"
    assert db.blog_sources.count_documents({}) == 0


def test_delete_blog_cascades(db, blog):
    store.finalize(db, blog["_id"], {"content": "Body"}, [{"url": "https://x.example.com"}],
                   {"status": "COMPLETED"})
    task_queue.enqueue_generation(db, blog["_id"], blog["topic"])

    assert store.delete_blog(db, blog["_id"]) is True

    assert store.get_blog(db, blog["_id"]) is None
    assert store.get_job(db, blog["_id"]) is None
    assert store.get_citations(db, blog["_id"]) == []
    assert task_queue.get_entries(db, blog["_id"]) == []
    assert store.delete_blog(db, blog["_id"]) is False


class TestTransactions:
    """mongomock has no sessions, so these run against a mocked client."""

    def _transactional_db(self):
        db = MagicMock()
        session = MagicMock()
        db.client.start_session.return_value.__enter__.return_value = session
        session.with_transaction.side_effect = lambda callback: callback(session)
        db.blogs.update_one.return_value.matched_count = 1
        db.blog_generations.update_one.return_value.matched_count = 1
        return db, session

    def test_finalize_writes_share_one_session(self):
        db, session = self._transactional_db()

        store.finalize(
            db,
            "blog-1",
            {"title": "Edge Retail", "content": "Body"},
            [{"title": "One", "url": "https://one.example.com"}],
            {"status": "COMPLETED"},
            use_transaction=True,
        )

        session.with_transaction.assert_called_once()
        assert db.blogs.update_one.call_args.kwargs["session"] is session
        assert db.blog_sources.insert_many.call_args.kwargs["session"] is session
        assert db.blog_generations.update_one.call_args.kwargs["session"] is session

    def test_finalize_error_inside_transaction_propagates(self):
        db, session = self._transactional_db()
        db.blogs.update_one.return_value.matched_count = 0

        with pytest.raises(BlogNotFound):
            store.finalize(db, "blog-1", {"content": "Body"}, [{"url": "https://x.example.com"}],
                           {"status": "COMPLETED"}, use_transaction=True)

        db.blog_sources.insert_many.assert_not_called()
        db.blog_generations.update_one.assert_not_called()

    def test_create_blog_inserts_both_documents_in_session(self):
        db, session = self._transactional_db()

        blog = store.create_blog(db, "Transactional topic", use_transaction=True)

        assert db.blogs.insert_one.call_args.args[0]["_id"] == blog["_id"]
        assert db.blogs.insert_one.call_args.kwargs["session"] is session
        job_doc = db.blog_generations.insert_one.call_args.args[0]
        assert job_doc["blog_id"] == blog["_id"]
        assert db.blog_generations.insert_one.call_args.kwargs["session"] is session

    def test_without_transaction_no_session_is_started(self, db, blog):
        with patch.object(db.client, "start_session") as start_session:
            store.finalize(db, blog["_id"], {"content": "Body"}, [], {"status": "COMPLETED"})

        start_session.assert_not_called()
