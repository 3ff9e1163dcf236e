"""Pydantic DTOs exchanged with collaborators and exposed via API."""

from __future__ import annotations

from typing import Iterator, Literal

from pydantic import BaseModel, Field

CloneStatus = Literal["pending", "done", "failed"]


class FileEntry(BaseModel):
    type: Literal["file", "directory"] = "file"
    name: str
    children: list["FileEntry"] = Field(default_factory=list)

    def iter_paths(self, prefix: str = "") -> Iterator[str]:
        """Yield slash-joined paths of every file below this entry."""
        path = f"{prefix}/{self.name}" if prefix and self.name else (self.name or prefix)
        if self.type == "file":
            yield path
            return
        for child in self.children:
            yield from child.iter_paths(path)


FileEntry.model_rebuild()


class ListResponse(BaseModel):
    status: CloneStatus
    root: FileEntry | None = None

    def files(self) -> list[str]:
        if self.root is None:
            return []
        return list(self.root.iter_paths())


class ReadResponse(BaseModel):
    contents: str


class SubmissionRecord(BaseModel):
    """A submission as listed by the platform for a course."""

    id: int
    denizen_id: int
    state: str = "open"
    denizen: str | None = None
    project: str | None = None
    project_deleted: bool = False


class CheckRequest(BaseModel):
    course_id: int


class CheckResponse(BaseModel):
    course_id: int
    enqueued: int


class CloneInfo(BaseModel):
    submission_id: int
    denizen: str | None = None
    project: str | None = None
    file: str
    from_line: int
    to_line: int
    function_name: str


class ReportResponse(BaseModel):
    submission_id: int
    type: str
    body: list[list[CloneInfo]]
    created_at: int


class StatusResponse(BaseModel):
    queued: int
    processed: int
    sequences: int
    tokens: int
    running: bool


__all__ = [
    "CloneStatus",
    "FileEntry",
    "ListResponse",
    "ReadResponse",
    "SubmissionRecord",
    "CheckRequest",
    "CheckResponse",
    "CloneInfo",
    "ReportResponse",
    "StatusResponse",
]
