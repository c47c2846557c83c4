"""Domain errors raised by the store and the chat service."""
from __future__ import annotations


class ChatError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ChatError):
    """Malformed or missing required field."""

    status_code = 400


class NotFoundError(ChatError):
    """Referenced id does not exist."""

    status_code = 404


class StorageError(ChatError):
    """Document file is missing, unreadable, unwritable or malformed."""

    status_code = 500
