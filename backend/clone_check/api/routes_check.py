"""Clone check API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from clone_check.api.dependencies import get_index_worker, get_pipeline, get_scheduler
from clone_check.check.pipeline import ClonePipeline
from clone_check.core.errors import CodeStorageError
from clone_check.index.worker import IndexWorker
from clone_check.models.dto import CheckRequest, CheckResponse, StatusResponse
from clone_check.scheduler import Scheduler

router = APIRouter()


@router.post("/check", response_model=CheckResponse, summary="Run a clone check for a course")
async def run_check(
    request: CheckRequest,
    pipeline: ClonePipeline = Depends(get_pipeline),
    scheduler: Scheduler = Depends(get_scheduler),
) -> CheckResponse:
    try:
        requests = await pipeline.check_requests(request.course_id)
    except CodeStorageError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    enqueued = scheduler.submit(requests)
    return CheckResponse(course_id=request.course_id, enqueued=enqueued)


@router.get("/status", response_model=StatusResponse, summary="Scheduler and index state")
async def status(
    scheduler: Scheduler = Depends(get_scheduler),
    worker: IndexWorker = Depends(get_index_worker),
) -> StatusResponse:
    stats = await worker.stats()
    return StatusResponse(queued=scheduler.pending(), running=scheduler.running, **stats)
