from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlmodel import Session

from backend.engine import AIAnalyzer, ScanLifecycleManager

from .api import ai as ai_api
from .api import dashboard, devices, notifications, profile, reports, scans, schedules, ui_router
from .config import settings
from .database import engine, init_db, session_factory
from .seed import seed_demo_data

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Vulnerability management for network firewalls",
)

logger = logging.getLogger("vulnsentry.api")

settings.static_dir.mkdir(parents=True, exist_ok=True)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")

# UI routes first so bare paths resolve to pages
app.include_router(ui_router.router)
app.include_router(dashboard.router, prefix="/api")
app.include_router(devices.router, prefix="/api")
app.include_router(scans.router, prefix="/api")
app.include_router(schedules.router, prefix="/api")
app.include_router(notifications.router, prefix="/api")
app.include_router(reports.router, prefix="/api")
app.include_router(ai_api.router, prefix="/api")
app.include_router(profile.router, prefix="/api")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        duration_ms = int((time.time() - start) * 1000)
        status_code = response.status_code if response else 500
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, status_code, duration_ms)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse({"detail": exc.detail, "status": exc.status_code}, status_code=exc.status_code)


@app.on_event("startup")
def startup_event() -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    init_db()
    if settings.environment.lower() == "development" and settings.seed_demo_data:
        with Session(engine) as session:
            seed_demo_data(session)
    app.state.analyzer = AIAnalyzer()
    app.state.lifecycle = ScanLifecycleManager(session_factory, analyzer=app.state.analyzer)
    if not app.state.analyzer.enabled:
        logger.warning("No AI provider configured; AI operations return fallback analysis")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    lifecycle = getattr(app.state, "lifecycle", None)
    if lifecycle is not None:
        await lifecycle.shutdown()


@app.get("/api")
def api_root() -> dict[str, str]:
    return {"service": settings.app_name, "version": settings.version, "status": "running"}


@app.get("/health")
def health() -> dict[str, str]:
    with Session(engine) as session:
        session.exec(text("SELECT 1"))
    return {"status": "healthy", "database": "connected"}
