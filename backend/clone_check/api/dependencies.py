"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from clone_check.check.pipeline import ClonePipeline
from clone_check.core.config import Settings, get_settings
from clone_check.db.sqlite import SQLiteDatabase
from clone_check.index.worker import IndexWorker
from clone_check.report.store import ReportStore
from clone_check.scheduler import Scheduler
from clone_check.storage.client import CodeStorage, HttpCodeStorage

_DB: SQLiteDatabase | None = None
_WORKER: IndexWorker | None = None
_STORAGE: CodeStorage | None = None
_PIPELINE: ClonePipeline | None = None
_SCHEDULER: Scheduler | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_database() -> SQLiteDatabase:
    global _DB
    if _DB is None:
        db = SQLiteDatabase(get_app_settings().db_path)
        db.ensure_schema()
        _DB = db
    return _DB


def get_report_store() -> ReportStore:
    return ReportStore(get_database())


def get_index_worker() -> IndexWorker:
    global _WORKER
    if _WORKER is None:
        _WORKER = IndexWorker()
    return _WORKER


def get_code_storage() -> CodeStorage:
    global _STORAGE
    if _STORAGE is None:
        _STORAGE = HttpCodeStorage.from_settings(get_app_settings())
    return _STORAGE


def get_pipeline() -> ClonePipeline:
    global _PIPELINE
    if _PIPELINE is None:
        _PIPELINE = ClonePipeline(
            storage=get_code_storage(),
            worker=get_index_worker(),
            reports=get_report_store(),
            settings=get_app_settings(),
        )
    return _PIPELINE


def get_scheduler() -> Scheduler:
    global _SCHEDULER
    if _SCHEDULER is None:
        _SCHEDULER = Scheduler(get_pipeline().execute, get_app_settings())
    return _SCHEDULER


__all__ = [
    "get_app_settings",
    "get_database",
    "get_report_store",
    "get_index_worker",
    "get_code_storage",
    "get_pipeline",
    "get_scheduler",
]
