"""Tests for the request gateway."""

from __future__ import annotations

import uuid

import pytest

from daybook.errors import (
    MediaImportError,
    NotInitializedError,
    UnknownRequestError,
    ValidationError,
)
from daybook.gateway import JournalGateway
from daybook.models import Journal, JournalContent, MediaSelection
from daybook.storage import JournalStore


def test_create_scenario_returns_row_with_generated_id(gateway):
    """Creating "Day 1" mints an id and round-trips the content structure."""
    created = gateway.create_journal(
        {
            "title": "Day 1",
            "content": {"bullets": ["woke up"], "images": [], "videos": []},
        }
    )

    assert isinstance(created, Journal)
    assert str(uuid.UUID(created.id)) == created.id
    assert created.title == "Day 1"
    assert created.content == JournalContent(bullets=["woke up"])
    assert created.created_at and created.updated_at

    fetched = gateway.get_journal(created.id)
    assert fetched == created


def test_create_ignores_caller_supplied_id(store):
    gateway = JournalGateway(store, id_factory=lambda: "minted")
    created = gateway.create_journal({"id": "caller", "title": "T", "content": None})
    assert created.id == "minted"
    assert gateway.get_journal("caller") is None


def test_create_requires_title(gateway):
    with pytest.raises(ValidationError):
        gateway.create_journal({"title": "", "content": None})
    with pytest.raises(ValidationError):
        gateway.create_journal({"content": {"bullets": []}})
    with pytest.raises(ValidationError):
        gateway.create_journal(None)
    assert gateway.get_all_journals() == []


def test_create_does_not_mutate_request(gateway):
    payload = {"title": "T", "content": {"bullets": ["a"], "images": [], "videos": []}}
    gateway.create_journal(payload)
    assert payload == {
        "title": "T",
        "content": {"bullets": ["a"], "images": [], "videos": []},
    }


def test_create_accepts_journal_object(gateway):
    draft = Journal(id="draft", title="Draft", content=JournalContent(bullets=["x"]))
    created = gateway.create_journal(draft)
    assert created.id != "draft"
    assert created.content == JournalContent(bullets=["x"])


def test_id_is_required(gateway):
    with pytest.raises(ValidationError):
        gateway.get_journal("")
    with pytest.raises(ValidationError):
        gateway.get_journal(None)
    with pytest.raises(ValidationError):
        gateway.update_journal({"title": "x"})
    with pytest.raises(ValidationError):
        gateway.delete_journal("")
    with pytest.raises(ValidationError):
        gateway.auto_save_journal({"title": "x"})


def test_update_missing_id_affects_zero_rows(gateway):
    result = gateway.update_journal({"id": "missing", "title": "x"})
    assert result.changes == 0
    assert gateway.get_journal("missing") is None


def test_update_serializes_structured_content(gateway):
    created = gateway.create_journal({"title": "T", "content": None})
    result = gateway.update_journal(
        {"id": created.id, "title": "T2", "content": JournalContent(bullets=["b"])}
    )
    assert result.changes == 1

    fetched = gateway.get_journal(created.id)
    assert fetched.title == "T2"
    assert fetched.content == JournalContent(bullets=["b"])


def test_delete_then_get_is_empty(gateway):
    created = gateway.create_journal({"title": "X", "content": None})
    assert gateway.delete_journal(created.id).changes == 1
    assert gateway.get_journal(created.id) is None
    assert gateway.delete_journal("x").changes == 0
    assert gateway.get_journal("x") is None


def test_auto_save_creates_then_updates(gateway):
    record = {"id": "draft-1", "title": "Draft", "content": {"bullets": ["one"]}}
    gateway.auto_save_journal(record)
    gateway.auto_save_journal(
        {"id": "draft-1", "title": "Draft", "content": {"bullets": ["one", "two"]}}
    )

    journals = gateway.get_all_journals()
    assert len(journals) == 1
    assert journals[0].content.bullets == ["one", "two"]


def test_malformed_stored_content_reads_as_empty_structure(store, gateway):
    store.create_journal({"id": "bad", "title": "Bad", "content": "{oops"})
    store.create_journal({"id": "empty", "title": "Empty", "content": None})

    assert gateway.get_journal("bad").content == JournalContent()
    by_id = {journal.id: journal for journal in gateway.get_all_journals()}
    assert by_id["bad"].content == JournalContent()
    assert by_id["empty"].content is None


def test_get_all_sorted_by_updated_at(gateway, set_timestamps):
    first = gateway.create_journal({"title": "first", "content": None})
    second = gateway.create_journal({"title": "second", "content": None})
    set_timestamps(first.id, updated_at="2024-05-02 10:00:00")
    set_timestamps(second.id, updated_at="2024-05-01 10:00:00")

    assert [j.title for j in gateway.get_all_journals()] == ["first", "second"]


def test_handle_dispatches_by_request_name(gateway):
    created = gateway.handle("create-journal", {"title": "Via handle", "content": None})
    assert gateway.handle("get-journal", created.id) == created
    assert gateway.handle("get-all-journals") == [created]
    assert gateway.handle("update-journal", {"id": created.id, "title": "U"}).changes == 1
    assert gateway.handle("auto-save-journal", {"id": created.id, "title": "A"}).changes == 1
    assert gateway.handle("delete-journal", created.id).changes == 1
    assert gateway.handle("get-all-journals") == []


def test_handle_rejects_unknown_request(gateway):
    with pytest.raises(UnknownRequestError):
        gateway.handle("publish-journal", "x")


def test_request_names_cover_boundary(gateway):
    assert set(gateway.request_names) == {
        "get-journal",
        "get-all-journals",
        "create-journal",
        "update-journal",
        "delete-journal",
        "auto-save-journal",
        "select-image",
        "select-video",
    }


def test_store_errors_propagate(db_path):
    gateway = JournalGateway(JournalStore(db_path))
    with pytest.raises(NotInitializedError):
        gateway.get_all_journals()
    with pytest.raises(NotInitializedError):
        gateway.create_journal({"title": "T", "content": None})


def test_select_image_encodes_picked_file(gateway, tmp_path):
    image = tmp_path / "photo.png"
    image.write_bytes(b"\x89PNG")
    gateway.file_picker = lambda kind: str(image) if kind == "image" else None

    selection = gateway.handle("select-image")

    assert selection == MediaSelection(
        path=str(image), base64="data:image/png;base64,iVBORw=="
    )
    assert gateway.handle("select-video") is None


def test_select_media_without_picker_or_cancelled(gateway):
    assert gateway.select_image() is None
    gateway.file_picker = lambda kind: None
    assert gateway.select_video() is None


def test_select_video_rejects_wrong_extension(gateway, tmp_path):
    clip = tmp_path / "clip.txt"
    clip.write_text("nope")
    gateway.file_picker = lambda kind: str(clip)
    with pytest.raises(MediaImportError):
        gateway.select_video()


@pytest.mark.parametrize(
    "name", ["create-journal", "update-journal", "auto-save-journal"]
)
@pytest.mark.parametrize("payload", ["abc", ["id", "title"], 42])
def test_non_record_payload_is_validation_error(gateway, name, payload):
    with pytest.raises(ValidationError) as excinfo:
        gateway.handle(name, payload)
    assert excinfo.value.operation == name


def test_missing_field_is_checked_before_content(gateway):
    """Unserializable content does not mask a missing title or id."""
    with pytest.raises(ValidationError):
        gateway.create_journal({"content": object()})
    with pytest.raises(ValidationError):
        gateway.update_journal({"title": "T", "content": object()})
    with pytest.raises(ValidationError):
        gateway.auto_save_journal({"title": "T", "content": object()})
