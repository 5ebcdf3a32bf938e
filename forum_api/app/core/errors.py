"""
Exception types shared by the store, the services and the dispatcher.

Each exception maps to one response status.  Authorization denials are
not exceptions: services report them as a plain ``False`` result.
"""

from typing import Any, Optional


class ForumError(Exception):
    """Base class for errors surfaced to callers."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ClientError(ForumError):
    """Malformed action, unknown resource/verb or invalid body."""

    status_code = 400


class NotFoundError(ForumError):
    """A single-entity fetch found nothing."""

    status_code = 404


class StorageError(ForumError):
    """Snapshot could not be read, decoded or written."""

    status_code = 500
