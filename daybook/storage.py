"""SQLite persistence for journals."""

from __future__ import annotations

import logging
import os
import platform
import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Any

from daybook.errors import (
    ConstraintViolationError,
    NotInitializedError,
    StorageError,
)
from daybook.models import JournalRecord, WriteResult

DATA_DIR_MODE = 0o755
DATABASE_FILE_MODE = 0o644

JOURNALS_SCHEMA = """
    CREATE TABLE IF NOT EXISTS journals (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        content TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        is_published BOOLEAN DEFAULT 0
    )
"""


CONNECTION_PRAGMAS = (
    ("journal_mode", "WAL"),
    ("synchronous", "NORMAL"),
    ("temp_store", "MEMORY"),
)


def apply_sqlite_pragmas(conn: sqlite3.Connection) -> list[str]:
    """Tune the long-lived journal connection and return the PRAGMAs that took.

    A PRAGMA the engine rejects is skipped; the connection keeps SQLite's
    default for it.
    """
    applied: list[str] = []
    for name, value in CONNECTION_PRAGMAS:
        try:
            conn.execute(f"PRAGMA {name}={value}")
        except sqlite3.DatabaseError:
            logging.warning("Could not set PRAGMA %s=%s; keeping the default", name, value)
            continue
        applied.append(f"{name}={value}")
    if applied:
        logging.info("Applied SQLite PRAGMAs: %s", ", ".join(applied))
    return applied


def ensure_data_directory(data_dir: Path) -> None:
    """Create the per-user data directory with restrictive permissions if missing."""
    if data_dir.exists():
        return
    logging.info("Creating journal data directory %s", data_dir)
    data_dir.mkdir(mode=DATA_DIR_MODE, parents=True, exist_ok=True)


def repair_database_permissions(db_path: Path) -> bool:
    """Make an existing database file readable and writable again.

    Returns True when the permissions had to be changed.
    """
    if not db_path.exists():
        return False
    if os.access(db_path, os.R_OK | os.W_OK):
        return False
    logging.warning("Journal database %s is not accessible; fixing permissions", db_path)
    db_path.chmod(DATABASE_FILE_MODE)
    return True


def _bind_record(record: JournalRecord | Mapping[str, Any]) -> dict[str, Any]:
    """Map a journal record onto the named parameters of the write statements."""
    values = asdict(record) if isinstance(record, JournalRecord) else dict(record)
    return {
        "id": values.get("id"),
        "title": values.get("title"),
        "content": values.get("content"),
    }


def _row_to_record(row: sqlite3.Row) -> JournalRecord:
    return JournalRecord(
        id=str(row["id"]),
        title=row["title"],
        content=row["content"],
        created_at=str(row["created_at"] or ""),
        updated_at=str(row["updated_at"] or ""),
        is_published=bool(row["is_published"]),
    )


@contextmanager
def _sqlite_errors(operation: str, journal_id: str | None = None) -> Iterator[None]:
    """Translate sqlite3 failures into journal errors, logging them once here."""
    try:
        yield
    except sqlite3.IntegrityError as exc:
        logging.exception(
            "Constraint violated during %s (journal %s)", operation, journal_id
        )
        raise ConstraintViolationError(
            str(exc), operation=operation, journal_id=journal_id
        ) from exc
    except sqlite3.Error as exc:
        logging.exception("Storage failure during %s (journal %s)", operation, journal_id)
        raise StorageError(str(exc), operation=operation, journal_id=journal_id) from exc


class JournalStore:
    """Owns the single connection to the journals database.

    The store is created once at startup and handed to the gateway. Calls are
    synchronous; the DB worker thread issues them one at a time.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._connection: sqlite3.Connection | None = None

    @property
    def is_initialized(self) -> bool:
        return self._connection is not None

    def initialize(self) -> bool:
        """Open the database and ensure the schema. Never raises.

        Calling it again once the connection is live does nothing.
        """
        if self._connection is not None:
            return True

        data_dir = self.db_path.parent
        logging.info("Initializing journal database at %s", self.db_path)
        conn: sqlite3.Connection | None = None
        try:
            ensure_data_directory(data_dir)
            repair_database_permissions(self.db_path)

            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            apply_sqlite_pragmas(conn)
            with conn:
                conn.execute(JOURNALS_SCHEMA)
            conn.execute("SELECT 1").fetchone()
        except (sqlite3.Error, OSError):
            logging.exception(
                "Failed to initialize journal database (db_path=%s, data_dir=%s, platform=%s, arch=%s)",
                self.db_path,
                data_dir,
                platform.system(),
                platform.machine(),
            )
            if conn is not None:
                conn.close()
            return False

        self._connection = conn
        logging.info("Journal database connection established")
        return True

    def close(self) -> None:
        """Close the connection; later operations raise NotInitializedError."""
        if self._connection is None:
            return
        try:
            self._connection.close()
        finally:
            self._connection = None
        logging.info("Closed journal database at %s", self.db_path)

    def _require_connection(
        self, operation: str, journal_id: str | None = None
    ) -> sqlite3.Connection:
        if self._connection is None:
            raise NotInitializedError(
                "Database not initialized", operation=operation, journal_id=journal_id
            )
        return self._connection

    def _write(self, operation: str, sql: str, params: Any, journal_id: str | None) -> WriteResult:
        conn = self._require_connection(operation, journal_id)
        with _sqlite_errors(operation, journal_id):
            with conn:
                cursor = conn.execute(sql, params)
        return WriteResult(changes=cursor.rowcount)

    def create_journal(self, record: JournalRecord | Mapping[str, Any]) -> WriteResult:
        """Insert a new journal row; the id must not exist yet."""
        params = _bind_record(record)
        result = self._write(
            "create-journal",
            "INSERT INTO journals (id, title, content) VALUES (:id, :title, :content)",
            params,
            params["id"],
        )
        logging.info("Created journal %s", params["id"])
        return result

    def get_all_journals(self) -> list[JournalRecord]:
        """Return every journal, most recently updated first."""
        conn = self._require_connection("get-all-journals")
        with _sqlite_errors("get-all-journals"):
            rows = conn.execute(
                "SELECT * FROM journals ORDER BY updated_at DESC"
            ).fetchall()
        return [_row_to_record(row) for row in rows]

    def get_journal_by_id(self, journal_id: str) -> JournalRecord | None:
        conn = self._require_connection("get-journal", journal_id)
        with _sqlite_errors("get-journal", journal_id):
            row = conn.execute(
                "SELECT * FROM journals WHERE id = ?", (journal_id,)
            ).fetchone()
        if row is None:
            return None
        return _row_to_record(row)

    def update_journal(self, record: JournalRecord | Mapping[str, Any]) -> WriteResult:
        """Replace title and content of an existing journal.

        An unknown id is not an error; the result reports zero changes.
        """
        params = _bind_record(record)
        return self._write(
            "update-journal",
            """
            UPDATE journals
            SET title = :title,
                content = :content,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = :id
            """,
            params,
            params["id"],
        )

    def delete_journal(self, journal_id: str) -> WriteResult:
        return self._write(
            "delete-journal",
            "DELETE FROM journals WHERE id = ?",
            (journal_id,),
            journal_id,
        )

    def auto_save_journal(self, record: JournalRecord | Mapping[str, Any]) -> WriteResult:
        """Insert the journal or overwrite its title and content, keeping created_at."""
        params = _bind_record(record)
        return self._write(
            "auto-save-journal",
            """
            INSERT INTO journals (id, title, content, updated_at)
            VALUES (:id, :title, :content, CURRENT_TIMESTAMP)
            ON CONFLICT(id) DO UPDATE SET
                title = excluded.title,
                content = excluded.content,
                updated_at = excluded.updated_at
            """,
            params,
            params["id"],
        )
