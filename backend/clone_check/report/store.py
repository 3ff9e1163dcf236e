"""Persistence of clone reports."""

from __future__ import annotations

import logging

import orjson

from clone_check.db.sqlite import SQLiteDatabase
from clone_check.models.dto import CloneInfo, ReportResponse
from clone_check.utils.time import now_ms

logger = logging.getLogger(__name__)

RESULT_TYPE = "klonecheck"


class ReportStore:
    """Create or overwrite one clone report row per submission."""

    def __init__(self, database: SQLiteDatabase, result_type: str = RESULT_TYPE) -> None:
        self.db = database
        self.result_type = result_type

    def save(self, submission_id: int, body: list[list[CloneInfo]]) -> None:
        payload = orjson.dumps([[info.model_dump() for info in clone_class] for clone_class in body])
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO submission_results (submission_id, type, body_json, created_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (submission_id, type)
                DO UPDATE SET body_json = excluded.body_json, created_at = excluded.created_at
                """,
                [submission_id, self.result_type, payload.decode("utf-8"), now_ms()],
            )
        logger.debug("Stored clone report for submission %s (%d classes)", submission_id, len(body))

    def get(self, submission_id: int) -> ReportResponse | None:
        row = self.db.fetchone(
            "SELECT submission_id, type, body_json, created_at FROM submission_results WHERE submission_id = ? AND type = ?",
            [submission_id, self.result_type],
        )
        if row is None:
            return None
        return ReportResponse(
            submission_id=row["submission_id"],
            type=row["type"],
            body=orjson.loads(row["body_json"]),
            created_at=row["created_at"],
        )

    def submission_ids(self) -> list[int]:
        rows = self.db.query(
            "SELECT submission_id FROM submission_results WHERE type = ? ORDER BY submission_id",
            [self.result_type],
        )
        return [row["submission_id"] for row in rows]


__all__ = ["ReportStore", "RESULT_TYPE"]
