"""Error types raised by the journal store, gateway and media import."""

from __future__ import annotations


class JournalError(Exception):
    """Base error carrying the operation name and the journal id it concerns."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        journal_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.journal_id = journal_id

    def __str__(self) -> str:
        context = []
        if self.operation:
            context.append(f"operation={self.operation}")
        if self.journal_id:
            context.append(f"id={self.journal_id}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class NotInitializedError(JournalError):
    """Raised when the store is used before a connection is established."""


class ValidationError(JournalError):
    """Raised when a request lacks a required id or title."""


class ConstraintViolationError(JournalError):
    """Raised on a duplicate id or a missing title at the storage layer."""


class StorageError(JournalError):
    """Raised for any other SQLite failure."""


class SerializationError(JournalError):
    """Raised when stored content text cannot be parsed back to a structure."""


class MediaImportError(JournalError):
    """Raised when a picked media file cannot be read or is not allowed."""


class UnknownRequestError(JournalError):
    """Raised when the gateway receives a request name it does not handle."""
