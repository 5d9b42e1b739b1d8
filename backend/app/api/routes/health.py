"""Health check endpoints. Public, and exempt from rate limiting."""

import logging
import os
import platform
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.db.session import Database

logger = logging.getLogger(__name__)

router = APIRouter()

_STARTED_AT = time.monotonic()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
async def health() -> dict[str, Any]:
    """Basic liveness check."""
    return {
        "success": True,
        "message": "API is running",
        "status": "healthy",
        "timestamp": _timestamp(),
    }


@router.get("/detailed")
async def health_detailed(request: Request) -> dict[str, Any]:
    """Liveness plus database state and process information."""
    database: Database = request.app.state.database
    return {
        "success": True,
        "status": "healthy",
        "timestamp": _timestamp(),
        "services": {
            "api": "running",
            "database": "connected" if database.is_connected else "disconnected",
        },
        "system": {
            "platform": platform.system().lower(),
            "arch": platform.machine(),
            "python_version": platform.python_version(),
            "pid": os.getpid(),
            "uptime_seconds": round(time.monotonic() - _STARTED_AT, 2),
        },
        "environment": settings.environment,
        "version": settings.app_version,
    }


@router.get("/db")
async def health_db(request: Request) -> JSONResponse:
    """Round-trip a query to the database."""
    database: Database = request.app.state.database
    try:
        latency_ms = await database.ping()
    except Exception as exc:
        logger.warning("Database health check failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "success": False,
                "database": {"status": "disconnected" if not database.is_connected else "error"},
                "timestamp": _timestamp(),
            },
        )
    return JSONResponse(
        content={
            "success": True,
            "database": {"status": "connected", "latency_ms": latency_ms},
            "timestamp": _timestamp(),
        }
    )
