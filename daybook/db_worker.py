"""Background database worker running in its own QThread.

This module exposes DBWorker, a QObject that forwards journal requests to
the gateway off the UI thread and emits signals with the results. All
requests arrive through one queued connection, so they reach the shared
SQLite connection strictly one after another.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal, Slot

from daybook.errors import JournalError
from daybook.gateway import JournalGateway


class DBWorker(QObject):
    """Worker running in a dedicated QThread to perform journal requests.

    Signals:
        request_finished: emitted with (request_id, name, result) on success
        request_failed: emitted with (request_id, name, message) on failure
    """

    request_finished = Signal(int, str, object)
    request_failed = Signal(int, str, str)

    def __init__(self, gateway: JournalGateway) -> None:
        super().__init__()
        self._gateway = gateway

    @Slot(int, str, object)
    def handle_request(self, request_id: int, name: str, payload: object) -> None:
        """Run one named request in the worker thread and report the outcome."""
        try:
            result = self._gateway.handle(name, payload)
        except JournalError as exc:
            self.request_failed.emit(request_id, name, str(exc))
            return
        except Exception as exc:
            logging.exception("DBWorker failed to handle %s", name)
            self.request_failed.emit(request_id, name, str(exc))
            return

        self.request_finished.emit(request_id, name, result)
