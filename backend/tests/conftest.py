"""Test fixtures for Clone Check."""

from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from clone_check.core.config import Settings  # noqa: E402
from clone_check.core.errors import CodeStorageError  # noqa: E402
from clone_check.models.dto import FileEntry, ListResponse, SubmissionRecord  # noqa: E402
from clone_check.models.tokens import Mode  # noqa: E402


class FakeCodeStorage:
    """In-memory code storage that can pretend repositories are still cloning."""

    def __init__(self) -> None:
        self.files: dict[tuple[Mode, int], dict[str, str]] = {}
        self.pending: Counter[tuple[Mode, int]] = Counter()
        self.failed: set[tuple[Mode, int]] = set()
        self.broken_reads: set[tuple[Mode, int]] = set()
        self.submissions: dict[int, list[SubmissionRecord]] = {}
        self.list_calls: Counter[tuple[Mode, int]] = Counter()

    def add(self, mode: Mode, entity_id: int, files: dict[str, str], pending: int = 0) -> None:
        self.files[(mode, entity_id)] = files
        self.pending[(mode, entity_id)] = pending

    def add_submission(self, course_id: int, record: SubmissionRecord, files: dict[str, str], pending: int = 0) -> None:
        self.submissions.setdefault(course_id, []).append(record)
        self.add(Mode.SUBMISSION, record.id, files, pending=pending)

    async def list_files(self, mode: Mode, entity_id: int) -> ListResponse:
        key = (mode, entity_id)
        self.list_calls[key] += 1
        if key in self.failed:
            return ListResponse(status="failed")
        if self.pending[key] > 0:
            self.pending[key] -= 1
            return ListResponse(status="pending")
        children = [FileEntry(type="file", name=path) for path in self.files.get(key, {})]
        return ListResponse(status="done", root=FileEntry(type="directory", name="", children=children))

    async def read_file(self, mode: Mode, entity_id: int, path: str) -> str:
        if (mode, entity_id) in self.broken_reads:
            raise CodeStorageError(f"cannot read {path}")
        return self.files[(mode, entity_id)][path]

    async def course_submissions(self, course_id: int) -> list[SubmissionRecord]:
        return list(self.submissions.get(course_id, []))


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    monkeypatch.setenv("CLONECHECK_DB_PATH", str(tmp_path / "reports.db"))
    monkeypatch.delenv("CLONECHECK_CONFIG", raising=False)

    from clone_check.api import dependencies as deps
    from clone_check.core.config import get_settings

    def _reset() -> None:
        get_settings.cache_clear()
        deps.get_app_settings.cache_clear()
        deps._DB = None
        deps._WORKER = None
        deps._STORAGE = None
        deps._PIPELINE = None
        deps._SCHEDULER = None

    _reset()
    yield
    _reset()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        db_path=tmp_path / "reports.db",
        fetch_concurrency=2,
        initial_delay_ms=0,
        busy_interval_ms=0,
        idle_interval_ms=0,
    )


@pytest.fixture
def code_storage() -> FakeCodeStorage:
    return FakeCodeStorage()


@pytest.fixture
def pipeline(settings: Settings, code_storage: FakeCodeStorage):
    from clone_check.check.pipeline import ClonePipeline
    from clone_check.db.sqlite import SQLiteDatabase
    from clone_check.index.worker import IndexWorker
    from clone_check.report.store import ReportStore

    db = SQLiteDatabase(settings.db_path)
    db.ensure_schema()
    worker = IndexWorker()
    yield ClonePipeline(storage=code_storage, worker=worker, reports=ReportStore(db), settings=settings)
    worker.close()
    db.close()


PRICE_A = '''
def total_price(items, tax):
    """Sum prices including tax."""
    result = 0
    for item in items:
        result += item.price * (1 + tax)
    return round(result, 2)
'''

PRICE_B = '''
def compute(goods, rate):
    acc = 0
    for g in goods:
        acc += g.cost * (1 + rate)
    return round(acc, 3)
'''

GREETING = '''
def greet(name):
    return "Hello, " + name
'''

ARGS = '''
def parse_args(argv):
    if not argv:
        raise ValueError("missing")
    return argv[1:]
'''


@pytest.fixture(scope="session")
def sources() -> dict[str, str]:
    return {"price_a": PRICE_A, "price_b": PRICE_B, "greeting": GREETING, "args": ARGS}
