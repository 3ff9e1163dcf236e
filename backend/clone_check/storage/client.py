"""Client for the code storage service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import requests

from clone_check.core.config import Settings
from clone_check.core.errors import CodeStorageError
from clone_check.models.dto import ListResponse, ReadResponse, SubmissionRecord
from clone_check.models.tokens import Mode

logger = logging.getLogger(__name__)

_COLLECTIONS = {Mode.COURSE: "courses", Mode.SUBMISSION: "submissions"}


class CodeStorage(Protocol):
    """What the pipeline needs from the code storage collaborator."""

    async def list_files(self, mode: Mode, entity_id: int) -> ListResponse: ...

    async def read_file(self, mode: Mode, entity_id: int, path: str) -> str: ...

    async def course_submissions(self, course_id: int) -> list[SubmissionRecord]: ...


class HttpCodeStorage:
    """``CodeStorage`` over HTTP; blocking calls run in worker threads."""

    def __init__(self, base_url: str, timeout: float = 60.0, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpCodeStorage":
        return cls(settings.storage_url, timeout=settings.storage_timeout)

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise CodeStorageError(f"GET {url} failed: {exc}") from exc
        if not resp.ok:
            raise CodeStorageError(f"GET {url} returned {resp.status_code}: {resp.text[:200]}")
        return resp.json()

    async def list_files(self, mode: Mode, entity_id: int) -> ListResponse:
        payload = await asyncio.to_thread(self._get, f"/{_COLLECTIONS[mode]}/{entity_id}/code")
        return ListResponse.model_validate(payload)

    async def read_file(self, mode: Mode, entity_id: int, path: str) -> str:
        payload = await asyncio.to_thread(
            self._get, f"/{_COLLECTIONS[mode]}/{entity_id}/code/file", {"path": path}
        )
        return ReadResponse.model_validate(payload).contents

    async def course_submissions(self, course_id: int) -> list[SubmissionRecord]:
        payload = await asyncio.to_thread(self._get, f"/courses/{course_id}/submissions")
        return [SubmissionRecord.model_validate(item) for item in payload]

    def close(self) -> None:
        self.session.close()


__all__ = ["CodeStorage", "HttpCodeStorage"]
