# teslacam/main.py
"""
FastAPI application entry point.
Starts the clip scanner in the background and serves the read-only browsing API.
"""

import asyncio
import time

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from teslacam.config import settings
from teslacam.database import create_tables
from teslacam.routers import events, clips, videos, health
from teslacam.services.clip_scanner import build_scanner
from teslacam.utils.logger import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title="TeslaCam Viewer API",
    description="Dashcam event ingestion + browsing. Sentry and Saved clips, merged per camera.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(events.router, prefix="/api", tags=["Events"])
app.include_router(clips.router,  prefix="/api", tags=["Clips"])
app.include_router(videos.router, prefix="/api", tags=["Video"])
app.include_router(health.router, prefix="/api", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 TeslaCam Viewer starting up...")
    create_tables()
    logger.info("✅ Database tables ready")

    app.state.scanner = None
    app.state.scanner_task = None
    if not settings.SCANNER_ENABLED:
        logger.info("Clip scanner disabled (SCANNER_ENABLED=false)")
        return

    scanner = build_scanner()
    app.state.scanner = scanner
    app.state.scanner_task = asyncio.create_task(scanner.run(), name="clip-scanner")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 TeslaCam Viewer shutting down...")
    task = getattr(app.state, "scanner_task", None)
    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Clip scanner had stopped with an error: {e}", exc_info=True)
    scanner = getattr(app.state, "scanner", None)
    if scanner is not None:
        await scanner.metadata_parser.geocoder.aclose()
