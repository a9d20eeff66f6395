"""Tests for the DB worker's request signalling."""

from __future__ import annotations

from daybook.db_worker import DBWorker


def test_worker_emits_finished_with_result(gateway):
    worker = DBWorker(gateway)
    finished = []
    failed = []
    worker.request_finished.connect(lambda *args: finished.append(args))
    worker.request_failed.connect(lambda *args: failed.append(args))

    worker.handle_request(1, "create-journal", {"title": "Day 1", "content": None})

    assert failed == []
    assert len(finished) == 1
    request_id, name, journal = finished[0]
    assert (request_id, name) == (1, "create-journal")
    assert journal.title == "Day 1"


def test_worker_emits_failure_message(gateway):
    worker = DBWorker(gateway)
    failed = []
    worker.request_failed.connect(lambda *args: failed.append(args))

    worker.handle_request(7, "delete-journal", "")

    assert len(failed) == 1
    request_id, name, message = failed[0]
    assert (request_id, name) == (7, "delete-journal")
    assert "Journal ID is required" in message
