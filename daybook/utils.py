"""Utility functions for formatting and rendering journals."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from daybook.constants import (
    EMPTY_HISTORY_TEMPLATE,
    JOURNAL_DETAIL_TEMPLATE,
    PREVIEW_CHARACTER_LIMIT,
)
from daybook.models import Journal


def format_timestamp_display(timestamp: str) -> str:
    """Render SQLite timestamps into a compact, reader-friendly string."""
    if not timestamp:
        return "Unknown time"
    try:
        dt = datetime.fromisoformat(timestamp)
    except ValueError:
        return timestamp
    return dt.strftime("%Y-%m-%d %H:%M")


def journal_preview(journal: Journal, limit: int = PREVIEW_CHARACTER_LIMIT) -> str:
    """Join the journal's bullets into a one-line preview."""
    if journal.content is None:
        return ""
    preview = " · ".join(
        " ".join(str(bullet).split()) for bullet in journal.content.bullets if str(bullet).strip()
    )
    if len(preview) > limit:
        preview = preview[: limit - 1] + "…"
    return preview


def media_source(reference: Any) -> str:
    """Pick the displayable source out of a stored media reference."""
    if isinstance(reference, dict):
        return str(reference.get("base64") or reference.get("path") or "")
    return str(reference)


def media_label(reference: Any) -> str:
    """Short name for a media reference, used in lists."""
    if isinstance(reference, dict) and reference.get("path"):
        return Path(str(reference["path"])).name
    text = str(reference)
    if text.startswith("data:"):
        return text.split(";", 1)[0][len("data:") :]
    return text


def review_theme_colors(dark_mode: bool) -> dict[str, str]:
    """Choose review pane colors based on the current palette."""
    if dark_mode:
        return {
            "text": "#dfe6e9",
            "secondary": "#a4b0be",
            "divider": "#3a3f44",
        }
    return {
        "text": "#2d3436",
        "secondary": "#636e72",
        "divider": "#dfe6e9",
    }


def render_journal_detail_html(journal: Journal, dark_mode: bool = False) -> str:
    """Render the selected journal via the Jinja2 template."""
    content = journal.content
    bullets = [str(b) for b in content.bullets if str(b).strip()] if content else []
    images = [media_source(ref) for ref in content.images] if content else []
    videos = [media_label(ref) for ref in content.videos] if content else []

    return JOURNAL_DETAIL_TEMPLATE.render(
        colors=review_theme_colors(dark_mode),
        title=journal.title,
        created_display=format_timestamp_display(journal.created_at),
        updated_display=format_timestamp_display(journal.updated_at),
        is_published=journal.is_published,
        bullets=bullets,
        images=[src for src in images if src],
        videos=videos,
        empty_body_notice="(No bullets yet)",
    )


def render_empty_history_html(dark_mode: bool) -> str:
    """Render a friendly empty-state message that respects theme colors."""
    return EMPTY_HISTORY_TEMPLATE.render(colors=review_theme_colors(dark_mode))
