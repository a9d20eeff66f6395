"""Request gateway between the presentation layer and the journal store.

Each named request validates its input, converts content between its
structured and stored forms and forwards to :class:`JournalStore`. Store
errors are passed through untouched; they were already logged where they
were raised.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from daybook.content import deserialize_content, serialize_content
from daybook.errors import StorageError, UnknownRequestError, ValidationError
from daybook.media import encode_media_file
from daybook.models import Journal, JournalRecord, MediaSelection, WriteResult
from daybook.storage import JournalStore

FilePicker = Callable[[str], "str | None"]


def new_journal_id() -> str:
    return str(uuid.uuid4())


def _to_journal(record: JournalRecord) -> Journal:
    return Journal(
        id=record.id,
        title=record.title,
        content=deserialize_content(record.content, record.id),
        created_at=record.created_at,
        updated_at=record.updated_at,
        is_published=record.is_published,
    )


_REQUIRED_MESSAGES = {
    "id": "Journal ID is required",
    "title": "Journal title is required",
}


def _prepare_record(
    payload: Journal | Mapping[str, Any] | None, operation: str, required: str
) -> dict[str, Any]:
    """Validate a request payload, then copy it with its content serialized."""
    if isinstance(payload, Journal):
        record = payload.to_record()
    elif isinstance(payload, Mapping):
        record = dict(payload)
    else:
        raise ValidationError("Invalid journal data", operation=operation)
    if not record.get(required):
        raise ValidationError(
            _REQUIRED_MESSAGES[required],
            operation=operation,
            journal_id=record.get("id") or None,
        )
    record["content"] = serialize_content(record.get("content"))
    return record


class JournalGateway:
    """Dispatches the boundary requests onto a journal store."""

    def __init__(
        self,
        store: JournalStore,
        *,
        id_factory: Callable[[], str] = new_journal_id,
        file_picker: FilePicker | None = None,
    ) -> None:
        self.store = store
        self.id_factory = id_factory
        self.file_picker = file_picker
        self._handlers: dict[str, Callable[..., Any]] = {
            "get-journal": self.get_journal,
            "get-all-journals": self.get_all_journals,
            "create-journal": self.create_journal,
            "update-journal": self.update_journal,
            "delete-journal": self.delete_journal,
            "auto-save-journal": self.auto_save_journal,
            "select-image": self.select_image,
            "select-video": self.select_video,
        }

    @property
    def request_names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def handle(self, name: str, payload: Any = None) -> Any:
        """Run the handler registered for a boundary request name."""
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownRequestError(f"Unknown request: {name}", operation=name)
        if name in ("get-all-journals", "select-image", "select-video"):
            return handler()
        return handler(payload)

    def get_journal(self, journal_id: str | None) -> Journal | None:
        if not journal_id:
            raise ValidationError("Journal ID is required", operation="get-journal")
        record = self.store.get_journal_by_id(journal_id)
        if record is None:
            return None
        return _to_journal(record)

    def get_all_journals(self) -> list[Journal]:
        return [_to_journal(record) for record in self.store.get_all_journals()]

    def create_journal(self, payload: Journal | Mapping[str, Any] | None) -> Journal:
        """Create a journal under a freshly minted id and return the stored row."""
        record = _prepare_record(payload, "create-journal", "title")
        record["id"] = self.id_factory()
        self.store.create_journal(record)
        created = self.store.get_journal_by_id(record["id"])
        if created is None:
            raise StorageError(
                "Created journal could not be read back",
                operation="create-journal",
                journal_id=record["id"],
            )
        return _to_journal(created)

    def update_journal(self, payload: Journal | Mapping[str, Any] | None) -> WriteResult:
        record = _prepare_record(payload, "update-journal", "id")
        return self.store.update_journal(record)

    def delete_journal(self, journal_id: str | None) -> WriteResult:
        if not journal_id:
            raise ValidationError("Journal ID is required", operation="delete-journal")
        return self.store.delete_journal(journal_id)

    def auto_save_journal(self, payload: Journal | Mapping[str, Any] | None) -> WriteResult:
        record = _prepare_record(payload, "auto-save-journal", "id")
        return self.store.auto_save_journal(record)

    def select_image(self) -> MediaSelection | None:
        return self._select_media("image")

    def select_video(self) -> MediaSelection | None:
        return self._select_media("video")

    def _select_media(self, kind: str) -> MediaSelection | None:
        if self.file_picker is None:
            logging.warning("No file picker available for select-%s", kind)
            return None
        path = self.file_picker(kind)
        if not path:
            return None
        return encode_media_file(path, kind)
