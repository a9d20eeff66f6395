"""User interface components and event handling."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from PySide6.QtCore import (
    QAbstractListModel,
    QModelIndex,
    QPersistentModelIndex,
    Qt,
    QThread,
    QTimer,
    Signal,
    Slot,
)
from PySide6.QtGui import QCloseEvent, QColor, QFont, QPalette
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListView,
    QListWidget,
    QMessageBox,
    QPushButton,
    QSplitter,
    QTextBrowser,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from daybook.constants import AUTO_SAVE_INTERVAL_MS, UNTITLED_JOURNAL_TITLE
from daybook.db_worker import DBWorker
from daybook.errors import JournalError
from daybook.gateway import JournalGateway, new_journal_id
from daybook.media import file_dialog_filter
from daybook.models import Journal, JournalContent
from daybook.utils import (
    format_timestamp_display,
    journal_preview,
    media_label,
    render_empty_history_html,
    render_journal_detail_html,
)


class JournalListModel(QAbstractListModel):
    """List model backing the journal history view."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._journals: list[Journal] = []

    def rowCount(
        self, parent: QModelIndex | QPersistentModelIndex = QModelIndex()
    ) -> int:
        if parent.isValid():
            return 0
        return len(self._journals)

    def data(
        self,
        index: QModelIndex | QPersistentModelIndex,
        role: int = Qt.ItemDataRole.DisplayRole,
    ) -> Any:
        if not index.isValid() or index.row() >= len(self._journals):
            return None

        journal = self._journals[index.row()]

        if role == Qt.ItemDataRole.DisplayRole:
            display_lines = [
                journal.title or UNTITLED_JOURNAL_TITLE,
                f"  [{format_timestamp_display(journal.updated_at)}]",
            ]
            preview = journal_preview(journal)
            if preview:
                display_lines.append(f"  -> {preview}")
            return "\n".join(display_lines)

        elif role == Qt.ItemDataRole.UserRole:
            return journal

        return None

    def get_journal(self, index: QModelIndex) -> Journal | None:
        if not index.isValid() or index.row() >= len(self._journals):
            return None
        return self._journals[index.row()]

    def row_for_id(self, journal_id: str) -> int:
        """Return the row holding the given journal id, or -1."""
        for row, journal in enumerate(self._journals):
            if journal.id == journal_id:
                return row
        return -1

    def set_journals(self, journals: list[Journal]) -> None:
        self.beginResetModel()
        self._journals = list(journals)
        self.endResetModel()

    def clear(self) -> None:
        self.beginResetModel()
        self._journals = []
        self.endResetModel()


class JournalWindow(QWidget):
    """Main window: journal history on the left, editor and preview on the right."""

    # (request_id, request name, payload), handled by DBWorker in its thread
    journal_request = Signal(int, str, object)

    def __init__(self, gateway: JournalGateway) -> None:
        super().__init__()
        self.setWindowTitle("Daybook")
        self.setObjectName("JournalWindow")
        self.setAutoFillBackground(True)
        self._apply_fluent_theme()

        self._gateway = gateway
        self._gateway.file_picker = self._pick_media_file

        self._request_counter = 0
        self._draft: Journal | None = None
        self._persisted = False
        self._dirty = False
        self._revision = 0
        # request_id -> (journal id, editor revision, record) for in-flight writes
        self._pending_writes: dict[int, tuple[str, int, dict[str, Any]]] = {}
        # draft id -> (record, revision) to apply once its create-journal returns
        self._followups: dict[str, tuple[dict[str, Any], int]] = {}
        self._creating_id: str | None = None
        self._closing = False
        self._images: list[Any] = []
        self._videos: list[Any] = []
        self._loading_editor = False

        layout = QHBoxLayout()
        layout.setContentsMargins(24, 24, 24, 20)
        self.splitter = QSplitter(Qt.Orientation.Horizontal)

        history_panel = QWidget()
        history_layout = QVBoxLayout()
        history_layout.setContentsMargins(0, 0, 0, 0)
        history_layout.addWidget(QLabel("Journals:"))

        self.history_list_model = JournalListModel(self)
        self.history_list = QListView()
        self.history_list.setObjectName("HistoryListView")
        self.history_list.setModel(self.history_list_model)
        self.history_list.setSelectionMode(QListView.SelectionMode.SingleSelection)
        self.history_list.setVerticalScrollMode(QListView.ScrollMode.ScrollPerPixel)
        self.history_list.selectionModel().currentChanged.connect(
            self.on_history_selection_changed
        )
        history_layout.addWidget(self.history_list)

        self.new_button = QPushButton("New Journal")
        self.new_button.clicked.connect(self.new_journal)
        history_layout.addWidget(self.new_button)
        history_panel.setLayout(history_layout)
        self.splitter.addWidget(history_panel)

        editor_panel = QWidget()
        editor_layout = QVBoxLayout()
        editor_layout.setContentsMargins(0, 0, 0, 0)
        editor_layout.setSpacing(12)

        editor_layout.addWidget(QLabel("Title:"))
        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Day 1")
        self.title_input.textChanged.connect(self.on_editor_changed)
        editor_layout.addWidget(self.title_input)

        editor_layout.addWidget(QLabel("Bullets (one per line):"))
        self.bullets_edit = QTextEdit()
        self.bullets_edit.setAcceptRichText(False)
        self.bullets_edit.textChanged.connect(self.on_editor_changed)
        editor_layout.addWidget(self.bullets_edit)

        editor_layout.addWidget(QLabel("Media:"))
        self.media_list = QListWidget()
        self.media_list.setMaximumHeight(110)
        editor_layout.addWidget(self.media_list)

        media_row = QHBoxLayout()
        self.add_image_button = QPushButton("Add Image")
        self.add_image_button.clicked.connect(self.add_image)
        media_row.addWidget(self.add_image_button)
        self.add_video_button = QPushButton("Add Video")
        self.add_video_button.clicked.connect(self.add_video)
        media_row.addWidget(self.add_video_button)
        self.remove_media_button = QPushButton("Remove Media")
        self.remove_media_button.clicked.connect(self.remove_selected_media)
        media_row.addWidget(self.remove_media_button)
        media_row.addStretch()
        editor_layout.addLayout(media_row)

        action_row = QHBoxLayout()
        self.save_button = QPushButton("Save Journal")
        self.save_button.clicked.connect(self.save_journal)
        action_row.addWidget(self.save_button)
        self.delete_button = QPushButton("Delete Journal")
        self.delete_button.clicked.connect(self.delete_journal)
        action_row.addWidget(self.delete_button)
        action_row.addStretch()
        self.status_label = QLabel("")
        self.status_label.setObjectName("statusLabel")
        action_row.addWidget(self.status_label)
        editor_layout.addLayout(action_row)

        self.detail_view = QTextBrowser()
        self.detail_view.setObjectName("HistoryDetailView")
        self.detail_view.setOpenExternalLinks(False)
        self.detail_view.setReadOnly(True)
        editor_layout.addWidget(self.detail_view)

        editor_panel.setLayout(editor_layout)
        self.splitter.addWidget(editor_panel)
        self.splitter.setStretchFactor(0, 1)
        self.splitter.setStretchFactor(1, 2)
        layout.addWidget(self.splitter)
        self.setLayout(layout)

        self.auto_save_timer = QTimer(self)
        self.auto_save_timer.setInterval(AUTO_SAVE_INTERVAL_MS)
        self.auto_save_timer.timeout.connect(self.auto_save)
        self.auto_save_timer.start()

        # Start DB worker thread and wire signals
        self._db_thread = QThread(self)
        self._db_worker = DBWorker(gateway)
        self._db_worker.moveToThread(self._db_thread)
        self.journal_request.connect(self._db_worker.handle_request)
        self._db_worker.request_finished.connect(self._on_request_finished)
        self._db_worker.request_failed.connect(self._on_request_failed)
        self._db_thread.start()

        self.new_journal()
        self.refresh_history()

    def _apply_fluent_theme(self) -> None:
        """Configure palette and styles to approximate Fluent Design."""
        app = QApplication.instance()
        QApplication.setStyle("Fusion")

        accent_color = QColor(15, 108, 189)
        foreground = QColor(32, 31, 30)
        neutral_window = QColor(243, 242, 241)
        neutral_base = QColor(255, 255, 255)

        palette = QPalette()
        palette.setColor(QPalette.ColorRole.Window, neutral_window)
        palette.setColor(QPalette.ColorRole.Base, neutral_base)
        palette.setColor(QPalette.ColorRole.Text, foreground)
        palette.setColor(QPalette.ColorRole.WindowText, foreground)
        palette.setColor(QPalette.ColorRole.ButtonText, foreground)
        palette.setColor(QPalette.ColorRole.Highlight, accent_color)

        if app is not None and isinstance(app, QApplication):
            app.setPalette(palette)

        self.setPalette(palette)
        self.setFont(QFont("Segoe UI", 10))

        accent_hex = accent_color.name()
        self.setStyleSheet(
            f"""
            QLineEdit, QTextEdit, QTextBrowser, QListWidget {{
                background-color: white;
                border: 1px solid rgba(32, 31, 30, 40);
                border-radius: 10px;
                padding: 6px 10px;
            }}
            QLineEdit:focus, QTextEdit:focus {{
                border: 2px solid {accent_hex};
            }}
            QListView#HistoryListView {{
                background-color: white;
                border: 1px solid rgba(32, 31, 30, 40);
                border-radius: 12px;
                padding: 6px;
            }}
            QListView#HistoryListView::item:selected {{
                background-color: {accent_hex};
                color: white;
            }}
            QPushButton {{
                background-color: {accent_hex};
                border: none;
                border-radius: 8px;
                padding: 8px 16px;
                font-weight: 600;
                color: white;
            }}
            QPushButton:hover {{
                background-color: #115ea3;
            }}
            QPushButton:disabled {{
                background-color: rgba(32, 31, 30, 77);
            }}
            QLabel#statusLabel {{
                color: rgba(32, 31, 30, 173);
                font-size: 9pt;
            }}
        """
        )

    def is_dark_theme(self) -> bool:
        palette = self.detail_view.palette()
        base_lightness = palette.color(QPalette.ColorRole.Base).lightnessF()
        window_lightness = palette.color(QPalette.ColorRole.Window).lightnessF()
        return min(base_lightness, window_lightness) < 0.5

    @property
    def current_journal_id(self) -> str | None:
        return self._draft.id if self._draft is not None else None

    @property
    def is_saving(self) -> bool:
        """True while a write for any draft has not been answered yet."""
        return bool(self._pending_writes or self._followups)

    # ---- requests ----
    def _send(self, name: str, payload: object = None) -> int:
        self._request_counter += 1
        if self._closing:
            # The worker thread is stopped; run the request here instead.
            self._db_worker.handle_request(self._request_counter, name, payload)
        else:
            self.journal_request.emit(self._request_counter, name, payload)
        return self._request_counter

    def _send_write(
        self, name: str, record: dict[str, Any], revision: int | None = None
    ) -> int:
        """Send a write and remember which journal and editor revision it carries."""
        if revision is None:
            revision = self._revision
        if name == "create-journal":
            self._creating_id = record["id"]
        request_id = self._request_counter + 1
        self._pending_writes[request_id] = (record["id"], revision, record)
        self._send(name, record)
        return request_id

    def _is_current_draft(self, journal_id: str) -> bool:
        return self._draft is not None and self._draft.id == journal_id

    def refresh_history(self) -> None:
        self._send("get-all-journals")

    def _editor_journal(self) -> Journal:
        """Build a journal from the editor widgets under the draft's id."""
        bullets = [
            line.strip()
            for line in self.bullets_edit.toPlainText().splitlines()
            if line.strip()
        ]
        draft_id = self._draft.id if self._draft is not None else new_journal_id()
        return Journal(
            id=draft_id,
            title=self.title_input.text().strip(),
            content=JournalContent(
                bullets=bullets, images=list(self._images), videos=list(self._videos)
            ),
        )

    def new_journal(self) -> None:
        """Start an unsaved draft; it gets persisted by Save or by auto-save."""
        self._flush_draft()
        self._draft = Journal(id=new_journal_id(), title="", content=JournalContent())
        self._persisted = False
        self._load_editor(self._draft)
        self.history_list.clearSelection()
        self.detail_view.setHtml(render_empty_history_html(self.is_dark_theme()))
        self.title_input.setFocus()

    def save_journal(self) -> None:
        journal = self._editor_journal()
        if not journal.title:
            QMessageBox.warning(
                self, "Missing Title", "Please give the journal a title before saving."
            )
            return

        record = journal.to_record()
        if self._creating_id == journal.id:
            self._followups[journal.id] = (record, self._revision)
        else:
            name = "update-journal" if self._persisted else "create-journal"
            self._send_write(name, record)
            self.save_button.setEnabled(False)
        self.status_label.setText("Saving…")

    def auto_save(self) -> None:
        """Upsert the draft if it changed since the last successful write."""
        self._flush_draft()

    def _flush_draft(self) -> None:
        """Write pending edits of the open draft without waiting for the result.

        While the draft's create-journal is in flight the edits are held back
        and applied to the id the create returns.
        """
        if not self._dirty or self._draft is None:
            return
        journal = self._editor_journal()
        if not journal.title:
            return
        record = journal.to_record()
        if self._creating_id == journal.id:
            self._followups[journal.id] = (record, self._revision)
            return
        self._send_write("auto-save-journal", record)

    def delete_journal(self) -> None:
        if self._draft is None:
            return
        if not self._persisted:
            self._dirty = False
            self.new_journal()
            return

        answer = QMessageBox.question(
            self,
            "Delete Journal",
            f"Delete “{self._draft.title or UNTITLED_JOURNAL_TITLE}”? This cannot be undone.",
        )
        if answer != QMessageBox.StandardButton.Yes:
            return
        self._send("delete-journal", self._draft.id)

    # ---- media ----
    def _pick_media_file(self, kind: str) -> str | None:
        """Open the native file chooser restricted to the media allowlist."""
        path, _ = QFileDialog.getOpenFileName(
            self,
            f"Select {kind.capitalize()}",
            str(Path.home()),
            file_dialog_filter(kind),
        )
        return path or None

    def add_image(self) -> None:
        self._import_media("select-image", self._images)

    def add_video(self) -> None:
        self._import_media("select-video", self._videos)

    def _import_media(self, request: str, target: list[Any]) -> None:
        # File dialogs must run on the UI thread, so media requests skip the worker.
        try:
            selection = self._gateway.handle(request)
        except JournalError as exc:
            QMessageBox.critical(self, "Import Failed", f"Could not import media: {exc}")
            return
        if selection is None:
            return
        target.append(selection.to_dict())
        self._refresh_media_list()
        self.on_editor_changed()

    def remove_selected_media(self) -> None:
        row = self.media_list.currentRow()
        if row < 0:
            return
        if row < len(self._images):
            del self._images[row]
        else:
            del self._videos[row - len(self._images)]
        self._refresh_media_list()
        self.on_editor_changed()

    def _refresh_media_list(self) -> None:
        self.media_list.clear()
        for reference in self._images:
            self.media_list.addItem(f"Image: {media_label(reference)}")
        for reference in self._videos:
            self.media_list.addItem(f"Video: {media_label(reference)}")

    # ---- editor state ----
    def _load_editor(self, journal: Journal) -> None:
        self._loading_editor = True
        try:
            content = journal.content or JournalContent()
            self.title_input.setText(journal.title)
            self.bullets_edit.setPlainText("\n".join(str(b) for b in content.bullets))
            self._images = list(content.images)
            self._videos = list(content.videos)
            self._refresh_media_list()
        finally:
            self._loading_editor = False
        self._revision += 1
        self._dirty = False
        self.status_label.setText("")

    def on_editor_changed(self, *_: object) -> None:
        if self._loading_editor:
            return
        self._dirty = True
        self._revision += 1
        self.status_label.setText("Unsaved changes")

    def on_history_selection_changed(
        self, current: QModelIndex, previous: QModelIndex
    ) -> None:
        journal = self.history_list_model.get_journal(current)
        if journal is None:
            return
        self.detail_view.setHtml(render_journal_detail_html(journal, self.is_dark_theme()))
        if self._draft is not None and journal.id == self._draft.id:
            return
        self._flush_draft()
        self._draft = journal
        self._persisted = True
        self._load_editor(journal)

    def _select_draft_row(self) -> None:
        if self._draft is None:
            return
        row = self.history_list_model.row_for_id(self._draft.id)
        if row < 0:
            return
        index = self.history_list_model.index(row, 0)
        self.history_list.setCurrentIndex(index)
        journal = self.history_list_model.get_journal(index)
        if journal is not None:
            self.detail_view.setHtml(
                render_journal_detail_html(journal, self.is_dark_theme())
            )

    # ---- background worker callbacks ----
    @Slot(int, str, object)
    def _on_request_finished(self, request_id: int, name: str, result: object) -> None:
        if name == "get-all-journals":
            journals = result or []
            if not journals:
                self.history_list_model.clear()
                self.detail_view.setHtml(render_empty_history_html(self.is_dark_theme()))
                return
            self.history_list_model.set_journals(journals)
            self._select_draft_row()
            return

        if name == "delete-journal":
            self._dirty = False
            self.new_journal()
            self.refresh_history()
            return

        pending = self._pending_writes.pop(request_id, None)
        if pending is None:
            return
        journal_id, revision, record = pending
        self.save_button.setEnabled(True)

        if name == "create-journal":
            self._on_journal_created(journal_id, revision, result)
        elif name == "update-journal" and getattr(result, "changes", 0) == 0:
            # The row is gone or was never written; upsert it instead.
            if self._is_current_draft(journal_id):
                self._persisted = False
            self._send_write("auto-save-journal", record, revision)
            return
        elif self._is_current_draft(journal_id):
            self._mark_saved(revision)

        if not self._closing:
            self.refresh_history()

    def _on_journal_created(self, draft_id: str, revision: int, created: object) -> None:
        if self._creating_id == draft_id:
            self._creating_id = None
        followup = self._followups.pop(draft_id, None)
        if not isinstance(created, Journal):
            return

        if self._is_current_draft(draft_id):
            self._draft = created
            if followup is None:
                self._mark_saved(revision)
            else:
                self._persisted = True
        if followup is not None:
            record, followup_revision = followup
            self._send_write("update-journal", {**record, "id": created.id}, followup_revision)

    def _mark_saved(self, revision: int) -> None:
        self._persisted = True
        if revision == self._revision:
            self._dirty = False
            self.status_label.setText("Saved")

    @Slot(int, str, str)
    def _on_request_failed(self, request_id: int, name: str, message: str) -> None:
        pending = self._pending_writes.pop(request_id, None)
        logging.error("Request %s failed: %s", name, message)
        self.save_button.setEnabled(True)
        self.status_label.setText("")
        if pending is not None and name == "create-journal":
            draft_id = pending[0]
            if self._creating_id == draft_id:
                self._creating_id = None
            followup = self._followups.pop(draft_id, None)
            if followup is not None:
                self._send_write("auto-save-journal", followup[0], followup[1])
        if not self._closing:
            QMessageBox.critical(
                self, "Journal Error", f"Could not complete {name}: {message}"
            )

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop the worker, then flush unsaved edits on this thread."""
        self.auto_save_timer.stop()
        try:
            if self._db_thread.isRunning():
                self._db_thread.quit()
                self._db_thread.wait(2000)
        except Exception:
            logging.exception("Failed to stop DB worker thread cleanly")

        self._closing = True
        # Deliver replies the worker posted before it stopped.
        QApplication.processEvents()
        # Requests still pending were dropped with the worker's event queue.
        self._pending_writes.clear()
        self._creating_id = None
        for record, revision in self._followups.values():
            self._send_write("auto-save-journal", record, revision)
        self._followups.clear()
        self._flush_draft()
        super().closeEvent(event)
