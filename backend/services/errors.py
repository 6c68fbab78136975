"""Annotation error taxonomy"""

from __future__ import annotations


class AnnotationError(Exception):
    """Base class for annotation failures"""


class InvalidPage(AnnotationError):
    """Diff identity cannot be determined from the page"""


class NotFound(AnnotationError):
    """No change log exists for a file; terminal for its region"""


class RequestFailed(AnnotationError):
    """Transport, auth or rate-limit failure; the region is retried later"""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class MalformedData(RequestFailed):
    """JSON or base64 payload could not be decoded"""

    def __init__(self, message: str):
        super().__init__(message, status=None)
