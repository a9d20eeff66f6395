"""Conversion between structured journal content and its stored JSON text."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from daybook.errors import SerializationError
from daybook.models import JournalContent

CONTENT_FIELDS = ("bullets", "images", "videos")


def serialize_content(value: JournalContent | Mapping[str, Any] | str | None) -> str | None:
    """Turn structured content into the text stored in the content column.

    Text is assumed to be serialized already and passes through unchanged.
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, JournalContent):
        payload: Mapping[str, Any] = value.to_dict()
    elif isinstance(value, Mapping):
        payload = value
    else:
        raise SerializationError(
            f"Unsupported content type: {type(value).__name__}",
            operation="serialize-content",
        )
    try:
        return json.dumps(dict(payload), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Content is not JSON serializable: {exc}",
            operation="serialize-content",
        ) from exc


def parse_content(text: str) -> JournalContent:
    """Parse stored text strictly, raising SerializationError on any mismatch."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Content is not valid JSON: {exc}", operation="parse-content"
        ) from exc

    if not isinstance(data, dict):
        raise SerializationError(
            "Content must be a JSON object", operation="parse-content"
        )

    fields: dict[str, list[Any]] = {}
    for name in CONTENT_FIELDS:
        items = data.get(name)
        if items is None:
            items = []
        if not isinstance(items, list):
            raise SerializationError(
                f"Content field {name!r} must be a list", operation="parse-content"
            )
        fields[name] = items
    return JournalContent(**fields)


def deserialize_content(
    text: str | None, journal_id: str | None = None
) -> JournalContent | None:
    """Read stored content back, falling back to an empty structure if malformed."""
    if text is None or text == "":
        return None
    try:
        return parse_content(text)
    except SerializationError as exc:
        logging.warning(
            "Replacing unreadable content of journal %s with an empty structure: %s",
            journal_id,
            exc.message,
        )
        return JournalContent()
