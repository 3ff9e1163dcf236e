"""Clone check work items and their priority queue."""

from __future__ import annotations

import heapq
import itertools
import threading
from dataclasses import dataclass
from typing import ClassVar

from clone_check.models.dto import SubmissionRecord


@dataclass(frozen=True)
class KloneRequest:
    """A unit of scheduled work; lower priority values run first."""

    priority: ClassVar[int] = 0

    @property
    def kind(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class ProcessCourseBaseRepo(KloneRequest):
    course_id: int

    priority: ClassVar[int] = 1


@dataclass(frozen=True)
class ProcessSubmission(KloneRequest):
    submission: SubmissionRecord

    priority: ClassVar[int] = 2


@dataclass(frozen=True)
class BuildSubmissionReport(KloneRequest):
    course_id: int
    submission: SubmissionRecord

    priority: ClassVar[int] = 3


@dataclass(frozen=True)
class BuildCourseReport(KloneRequest):
    course_id: int

    priority: ClassVar[int] = 4


@dataclass(frozen=True, slots=True)
class QueuedRequest:
    request: KloneRequest
    attempts: int = 0


class RequestQueue:
    """Binary-heap priority queue; equal priorities pop in insertion order."""

    def __init__(self) -> None:
        self._heap: list[tuple[int, int, QueuedRequest]] = []
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def push(self, request: KloneRequest, attempts: int = 0) -> None:
        with self._lock:
            heapq.heappush(self._heap, (request.priority, next(self._counter), QueuedRequest(request, attempts)))

    def pop(self) -> QueuedRequest | None:
        with self._lock:
            if not self._heap:
                return None
            return heapq.heappop(self._heap)[2]

    def __len__(self) -> int:
        with self._lock:
            return len(self._heap)


__all__ = [
    "KloneRequest",
    "ProcessCourseBaseRepo",
    "ProcessSubmission",
    "BuildSubmissionReport",
    "BuildCourseReport",
    "QueuedRequest",
    "RequestQueue",
]
