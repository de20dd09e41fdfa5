"""FastAPI application entry point."""

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from xpot_draw.config import settings
from xpot_draw.errors import XpotError

# Configure loguru
logger.remove()
logger.add(sys.stderr, level="DEBUG" if settings.DEBUG else "INFO")
if settings.LOG_FILE:
    logger.add(settings.LOG_FILE, rotation="10 MB", retention="7 days", level="INFO")

# Authenticated operators may see raw failure messages
_OPERATOR_PREFIXES = ("/api/admin", "/api/ops")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("Starting {} ({}) ...", settings.APP_NAME, settings.APP_ENV)

    if settings.BONUS_SCHEDULER_ENABLED:
        from xpot_draw.scheduler import start_scheduler
        start_scheduler()

    yield

    if settings.BONUS_SCHEDULER_ENABLED:
        from xpot_draw.scheduler import stop_scheduler
        stop_scheduler()

    from xpot_draw.db.engine import engine
    await engine.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Daily XPOT draw: tickets, winners and operator controls",
    lifespan=lifespan,
)


@app.exception_handler(XpotError)
async def xpot_error_handler(request: Request, exc: XpotError):
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.debug("Invalid request to {}: {}", request.url.path, exc.errors())
    return JSONResponse({"ok": False, "error": "INVALID_REQUEST"}, status_code=400)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.opt(exception=exc).error("Store failure on {}", request.url.path)
    payload = {"ok": False, "error": "INTERNAL_ERROR"}
    if request.url.path.startswith(_OPERATOR_PREFIXES):
        payload["message"] = str(exc)
    return JSONResponse(payload, status_code=500)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error("Unhandled error on {}", request.url.path)
    payload = {"ok": False, "error": "INTERNAL_ERROR"}
    if request.url.path.startswith(_OPERATOR_PREFIXES):
        payload["message"] = str(exc)
    return JSONResponse(payload, status_code=500)


# Include API routers
from xpot_draw.api.v1.router import api_router  # noqa: E402
app.include_router(api_router, prefix="/api")
