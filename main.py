"""Main entry point for the Daybook journal application."""

from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from daybook.constants import DATABASE_PATH, WINDOW_SIZE
from daybook.gateway import JournalGateway
from daybook.storage import JournalStore
from daybook.ui import JournalWindow


def main() -> int:
    """Open the journal store and launch the application."""
    store = JournalStore(DATABASE_PATH)
    if not store.initialize():
        logging.error(
            "Failed to initialize database. Application may not function correctly."
        )

    app = QApplication(sys.argv)
    window = JournalWindow(JournalGateway(store))
    window.resize(*WINDOW_SIZE)
    window.show()
    try:
        return int(app.exec())
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
