"""
Health and liveness endpoints.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from sqlalchemy import text

from ectracc.config import settings
from ectracc.database import engine

router = APIRouter()

STARTED_AT = time.monotonic()


def _row_store_status() -> str:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "connected"
    except Exception:
        return "unavailable"


@router.get("/healthcheck")
async def healthcheck(request: Request):
    """Service status including both backing stores."""
    catalog = getattr(request.app.state, "catalog_service", None)
    return {
        "success": True,
        "message": "ECTRACC API is running successfully",
        "data": {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - STARTED_AT, 2),
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "services": {
                "mongodb": "connected" if catalog is not None else "unavailable",
                "footprints_db": _row_store_status(),
            },
        },
    }


@router.get("/ping")
async def ping():
    return {"success": True, "message": "pong", "timestamp": datetime.now(timezone.utc).isoformat()}
