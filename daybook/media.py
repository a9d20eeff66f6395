"""Image and video import as inline data URIs."""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from daybook.constants import IMAGE_EXTENSIONS, VIDEO_EXTENSIONS
from daybook.errors import MediaImportError
from daybook.models import MediaSelection

MEDIA_KINDS = {
    "image": ("Images", IMAGE_EXTENSIONS),
    "video": ("Videos", VIDEO_EXTENSIONS),
}


def _kind_spec(kind: str) -> tuple[str, tuple[str, ...]]:
    try:
        return MEDIA_KINDS[kind]
    except KeyError:
        raise MediaImportError(
            f"Unknown media kind: {kind}", operation=f"select-{kind}"
        ) from None


def file_dialog_filter(kind: str) -> str:
    """Build the QFileDialog name filter restricting picks to the allowlist."""
    label, extensions = _kind_spec(kind)
    patterns = " ".join(f"*.{ext}" for ext in extensions)
    return f"{label} ({patterns})"


def encode_media_file(path: str | Path, kind: str) -> MediaSelection:
    """Read a media file in full and wrap it in a data URI.

    The MIME subtype is the file extension as picked, e.g. ``image/jpg``.
    """
    _, extensions = _kind_spec(kind)
    media_path = Path(path)
    extension = media_path.suffix[1:]
    if extension.lower() not in extensions:
        raise MediaImportError(
            f"Unsupported {kind} extension: {media_path.suffix or '(none)'}",
            operation=f"select-{kind}",
        )

    try:
        payload = media_path.read_bytes()
    except OSError as exc:
        logging.exception("Failed to read %s file %s", kind, media_path)
        raise MediaImportError(
            f"Could not read {media_path}: {exc}", operation=f"select-{kind}"
        ) from exc

    encoded = base64.b64encode(payload).decode("ascii")
    return MediaSelection(
        path=str(media_path),
        base64=f"data:{kind}/{extension};base64,{encoded}",
    )
