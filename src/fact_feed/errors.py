"""Error kinds and exceptions raised by the feed engine."""

from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    """Classification of failures surfaced to the user."""

    VALIDATION = "validation"
    READ = "read"
    WRITE = "write"
    UPLOAD = "upload"


class FactFeedError(Exception):
    """Base exception for all engine failures."""

    kind: ErrorKind = ErrorKind.WRITE

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        self.message = message
        if kind is not None:
            self.kind = kind
        super().__init__(self.message)


class FactValidationError(FactFeedError):
    """Local validation failed; nothing was sent to the remote store."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = errors or [message]
        super().__init__(message)


class ReadError(FactFeedError):
    """Feed fetch failed."""

    kind = ErrorKind.READ


class WriteError(FactFeedError):
    """Insert or vote update failed."""

    kind = ErrorKind.WRITE


class UploadError(FactFeedError):
    """Image upload or image URL patch failed. Always paired with a saved record."""

    kind = ErrorKind.UPLOAD


class GatewayError(Exception):
    """Transport-level failure raised by a remote store gateway."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)
