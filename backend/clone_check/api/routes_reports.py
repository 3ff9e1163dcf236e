"""Clone report routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from clone_check.api.dependencies import get_report_store
from clone_check.core.metrics import metrics_response
from clone_check.models.dto import ReportResponse
from clone_check.report.store import ReportStore

router = APIRouter()


@router.get("/reports", response_model=list[int], summary="Submissions with a clone report")
async def list_reports(store: ReportStore = Depends(get_report_store)) -> list[int]:
    return store.submission_ids()


@router.get("/reports/{submission_id}", response_model=ReportResponse, summary="Clone report of a submission")
async def get_report(submission_id: int, store: ReportStore = Depends(get_report_store)) -> ReportResponse:
    report = store.get(submission_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return metrics_response()
