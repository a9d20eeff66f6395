"""Shared fixtures for the journal tests."""

from __future__ import annotations

import shutil
import sqlite3
import tempfile
from pathlib import Path

import pytest

from daybook.gateway import JournalGateway
from daybook.storage import JournalStore


@pytest.fixture
def db_path():
    """A database path inside a fresh temporary data directory."""
    tmpdir = tempfile.mkdtemp()
    try:
        yield Path(tmpdir) / "data" / "journals.db"
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def store(db_path):
    journal_store = JournalStore(db_path)
    assert journal_store.initialize()
    try:
        yield journal_store
    finally:
        journal_store.close()


@pytest.fixture
def gateway(store):
    return JournalGateway(store)


@pytest.fixture
def set_timestamps(db_path):
    """Rewrite a row's timestamps through a second connection."""

    def _set(journal_id: str, *, updated_at: str, created_at: str | None = None) -> None:
        conn = sqlite3.connect(db_path)
        try:
            with conn:
                conn.execute(
                    "UPDATE journals SET updated_at = ? WHERE id = ?",
                    (updated_at, journal_id),
                )
                if created_at is not None:
                    conn.execute(
                        "UPDATE journals SET created_at = ? WHERE id = ?",
                        (created_at, journal_id),
                    )
        finally:
            conn.close()

    return _set
