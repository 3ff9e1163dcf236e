"""FastAPI application setup for Clone Check."""

from __future__ import annotations

from fastapi import FastAPI

from clone_check.api.dependencies import (
    get_app_settings,
    get_database,
    get_index_worker,
    get_scheduler,
)
from clone_check.api.routes_check import router as check_router
from clone_check.api.routes_reports import router as reports_router
from clone_check.core.logging import configure_logging

configure_logging()

app = FastAPI(
    title="Clone Check",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(check_router, prefix="", tags=["check"])
app.include_router(reports_router, prefix="", tags=["reports"])


@app.on_event("startup")
async def startup() -> None:
    """Warm up core singletons and start draining the queue."""
    get_app_settings()
    get_database()
    get_scheduler().start()


@app.on_event("shutdown")
async def shutdown() -> None:
    await get_scheduler().stop()
    get_index_worker().close()
    get_database().close()


@app.get("/health", tags=["admin"])
def health() -> dict[str, bool]:
    """Simple liveness check."""
    return {"ok": True}
