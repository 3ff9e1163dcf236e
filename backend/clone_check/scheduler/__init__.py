"""Priority scheduling of clone check work."""

from .driver import Outcome, Scheduler
from .requests import (
    BuildCourseReport,
    BuildSubmissionReport,
    KloneRequest,
    ProcessCourseBaseRepo,
    ProcessSubmission,
    RequestQueue,
)

__all__ = [
    "Outcome",
    "Scheduler",
    "KloneRequest",
    "ProcessCourseBaseRepo",
    "ProcessSubmission",
    "BuildSubmissionReport",
    "BuildCourseReport",
    "RequestQueue",
]
