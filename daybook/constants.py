"""Configuration constants and templates for the application."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from textwrap import dedent

from jinja2 import DictLoader, Environment, select_autoescape
from platformdirs import user_data_dir

APP_NAME = "Daybook"

# Database location, overridable for portable installs and tests
DATA_DIR = Path(os.environ.get("DAYBOOK_DATA_DIR") or user_data_dir(APP_NAME))
DATABASE_FILENAME = "journals.db"
DATABASE_PATH = DATA_DIR / DATABASE_FILENAME

# Editor timing and layout
AUTO_SAVE_INTERVAL_MS = 30 * 1000
PREVIEW_CHARACTER_LIMIT = 48
WINDOW_SIZE = (1200, 800)
UNTITLED_JOURNAL_TITLE = "Untitled"

# Media import allowlists
IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")
VIDEO_EXTENSIONS = ("mp4", "webm", "mov", "avi", "mkv")

# Basic logging setup
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

# Jinja2 template environment for HTML rendering
TEMPLATE_ENV = Environment(
    loader=DictLoader(
        {
            "journal_detail.html": dedent(
                """\
                <div style='font-family:"Segoe UI",sans-serif; line-height:1.6; color:{{ colors.text }};'>
                    <div style='margin-bottom:12px;'>
                        <div style='font-size:18px; font-weight:bold;'>{{ title }}</div>
                        <div style='color:{{ colors.secondary }};'>
                            Created {{ created_display }} · Updated {{ updated_display }}
                            {% if is_published %}· Published{% endif %}
                        </div>
                    </div>
                    <hr style='border:0; height:1px; background:{{ colors.divider }}; margin:12px 0;'>
                    {% if bullets %}
                    <ul style='margin:0 0 0 16px; padding:0;'>
                        {% for bullet in bullets %}
                        <li>{{ bullet }}</li>
                        {% endfor %}
                    </ul>
                    {% else %}
                    <p style='margin:0;'><em>{{ empty_body_notice }}</em></p>
                    {% endif %}
                    {% for image in images %}
                    <p style='margin:12px 0 0 0;'><img src='{{ image }}' width='320'></p>
                    {% endfor %}
                    {% if videos %}
                    <ul style='margin:12px 0 0 16px; padding:0; color:{{ colors.secondary }};'>
                        {% for video in videos %}
                        <li>Video: {{ video }}</li>
                        {% endfor %}
                    </ul>
                    {% endif %}
                </div>
                """
            ),
            "empty_history.html": dedent(
                """\
                <div style='font-family:"Segoe UI",sans-serif; color:{{ colors.secondary }};'>
                    No journals yet.
                </div>
                """
            ),
        }
    ),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

JOURNAL_DETAIL_TEMPLATE = TEMPLATE_ENV.get_template("journal_detail.html")
EMPTY_HISTORY_TEMPLATE = TEMPLATE_ENV.get_template("empty_history.html")
