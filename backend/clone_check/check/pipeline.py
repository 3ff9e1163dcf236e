"""Clone check pipeline: task bodies for indexing and reporting."""

from __future__ import annotations

import asyncio
from typing import Iterable, Sequence

from clone_check.core.config import Settings
from clone_check.core.errors import NotReadyYet, ParseFailure
from clone_check.core.logging import get_logger, task_context
from clone_check.core.metrics import CLONE_CLASSES, FILES_SKIPPED
from clone_check.index.worker import IndexWorker
from clone_check.models.dto import ListResponse, SubmissionRecord
from clone_check.models.tokens import NO_DENIZEN, Mode, SourceUnit
from clone_check.report.extractor import build_report_rows, find_clone_classes
from clone_check.report.store import ReportStore
from clone_check.scheduler.requests import (
    BuildCourseReport,
    BuildSubmissionReport,
    KloneRequest,
    ProcessCourseBaseRepo,
    ProcessSubmission,
)
from clone_check.storage.client import CodeStorage
from clone_check.tokenizers import TokenizerRegistry, default_registry

logger = get_logger(__name__)

ELIGIBLE_STATES = frozenset({"open", "closed"})


class ClonePipeline:
    """Coordinate code storage, tokenizers, the index worker and report storage.

    Every task body returns ``True`` once its work is done. Repositories that
    are still cloning, or failed to clone, raise ``NotReadyYet`` so the
    scheduler re-enqueues the task.
    """

    def __init__(
        self,
        storage: CodeStorage,
        worker: IndexWorker,
        reports: ReportStore,
        settings: Settings,
        registry: TokenizerRegistry | None = None,
    ) -> None:
        self.storage = storage
        self.worker = worker
        self.reports = reports
        self.settings = settings
        self.registry = registry or default_registry(settings.test_marker)

    async def course_submissions(self, course_id: int) -> list[SubmissionRecord]:
        records = await self.storage.course_submissions(course_id)
        return [
            record
            for record in records
            if record.state in ELIGIBLE_STATES and not record.project_deleted
        ]

    async def check_requests(self, course_id: int) -> list[KloneRequest]:
        """Work items for a course-wide check: baseline, submissions, report."""
        submissions = await self.course_submissions(course_id)
        requests: list[KloneRequest] = [ProcessCourseBaseRepo(course_id)]
        requests.extend(ProcessSubmission(submission) for submission in submissions)
        requests.append(BuildCourseReport(course_id))
        return requests

    async def execute(self, request: KloneRequest) -> bool:
        if isinstance(request, ProcessCourseBaseRepo):
            return await self.handle_base(request.course_id)
        if isinstance(request, ProcessSubmission):
            return await self.handle_submission(request.submission)
        if isinstance(request, BuildSubmissionReport):
            submissions = await self.course_submissions(request.course_id)
            if all(record.id != request.submission.id for record in submissions):
                submissions.append(request.submission)
            return await self.handle_report(submissions, only=request.submission.id)
        if isinstance(request, BuildCourseReport):
            submissions = await self.course_submissions(request.course_id)
            return await self.handle_report(submissions)
        raise TypeError(f"Unsupported request {request!r}")

    async def handle_base(self, course_id: int) -> bool:
        if await self.worker.is_processed((Mode.COURSE, course_id)):
            return True
        files = await self.storage.list_files(Mode.COURSE, course_id)
        # Baseline tokens have no owning student.
        return await self.handle_files(Mode.COURSE, course_id, NO_DENIZEN, files)

    async def handle_submission(self, submission: SubmissionRecord) -> bool:
        if await self.worker.is_processed((Mode.SUBMISSION, submission.id)):
            return True
        files = await self.storage.list_files(Mode.SUBMISSION, submission.id)
        return await self.handle_files(Mode.SUBMISSION, submission.id, submission.denizen_id, files)

    async def handle_files(self, mode: Mode, entity_id: int, denizen_id: int, files: ListResponse) -> bool:
        key = (mode, entity_id)
        if await self.worker.is_processed(key):
            return True
        if files.status == "failed":
            logger.warning(
                "Repository cloning failed for %s %s",
                mode.value,
                entity_id,
                extra=task_context(mode=mode.value, entity_id=entity_id),
            )
        if files.status != "done":
            raise NotReadyYet(f"{mode.value} {entity_id}", files.status)

        paths = [path for path in files.files() if self.registry.supports(path)]
        units = await self._tokenize_files(mode, entity_id, denizen_id, paths)
        sequence_ids = await self.worker.add_units(units)
        await self.worker.mark_processed(key)
        logger.info(
            "Indexed %s %s: %d files, %d sequences",
            mode.value,
            entity_id,
            len(paths),
            len(sequence_ids),
            extra=task_context(mode=mode.value, entity_id=entity_id),
        )
        return True

    async def _tokenize_files(
        self,
        mode: Mode,
        entity_id: int,
        denizen_id: int,
        paths: Sequence[str],
    ) -> list[SourceUnit]:
        semaphore = asyncio.Semaphore(self.settings.fetch_concurrency)

        async def fetch_and_tokenize(path: str) -> list[SourceUnit]:
            async with semaphore:
                contents = await self.storage.read_file(mode, entity_id, path)
            try:
                return await asyncio.to_thread(
                    self.registry.tokenize, contents, path, mode, entity_id, denizen_id
                )
            except ParseFailure as exc:
                logger.error("%s", exc, extra=task_context(mode=mode.value, entity_id=entity_id, file=path))
                tokenizer = self.registry.for_path(path)
                FILES_SKIPPED.labels(language=tokenizer.language if tokenizer else "unknown").inc()
                return []

        results = await asyncio.gather(*(fetch_and_tokenize(path) for path in paths), return_exceptions=True)
        units: list[SourceUnit] = []
        for result in results:
            if isinstance(result, BaseException):
                raise result
            units.extend(result)
        return units

    async def handle_report(self, submissions: Iterable[SubmissionRecord], only: int | None = None) -> bool:
        logger.debug("Handling report...")
        records = list(submissions)
        classes = await self.worker.query(find_clone_classes)
        rows = build_report_rows(classes, records)
        if only is not None:
            rows = {submission_id: body for submission_id, body in rows.items() if submission_id == only}
        for submission_id, body in rows.items():
            await asyncio.to_thread(self.reports.save, submission_id, body)
            CLONE_CLASSES.inc(len(body))
        logger.info("Stored clone reports for %d submissions", len(rows))
        return True


__all__ = ["ClonePipeline", "ELIGIBLE_STATES"]
