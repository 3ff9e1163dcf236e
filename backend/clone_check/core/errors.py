"""Exception taxonomy for the clone detection pipeline."""

from __future__ import annotations


class CloneCheckError(Exception):
    """Base class for pipeline errors."""


class NotReadyYet(CloneCheckError):
    """Upstream data is not available yet; the task should be retried."""

    def __init__(self, entity: str, status: str) -> None:
        super().__init__(f"{entity} is not ready ({status})")
        self.entity = entity
        self.status = status


class ParseFailure(CloneCheckError):
    """A single file could not be lexed or parsed."""

    def __init__(self, filename: str, detail: str) -> None:
        super().__init__(f"Cannot parse source {filename}: {detail}")
        self.filename = filename
        self.detail = detail


class CodeStorageError(CloneCheckError):
    """Transport or protocol error talking to the code storage service."""


class TransientTaskFailure(CloneCheckError):
    """Uncaught exception raised while executing a scheduled task."""

    def __init__(self, request: object, cause: BaseException) -> None:
        super().__init__(f"{request!r} failed: {cause}")
        self.request = request
        self.cause = cause


__all__ = [
    "CloneCheckError",
    "NotReadyYet",
    "ParseFailure",
    "CodeStorageError",
    "TransientTaskFailure",
]
