"""
Health endpoints.

- GET /health       - liveness, 200 while the process is up
- GET /health/ready - database reachability plus which webhooks are authenticated
"""
import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from admitlead.config import Settings, get_settings
from admitlead.database import get_db, ping

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])

VERSION = "1.0.0"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": _now(), "version": VERSION}


async def _check_database(db: AsyncSession) -> dict:
    started = time.monotonic()
    try:
        await ping(db)
    except Exception as e:
        logger.error("Database health check failed: %s", str(e))
        return {"ok": False, "error": type(e).__name__}
    return {"ok": True, "latency_ms": round((time.monotonic() - started) * 1000, 1)}


def _configuration(settings: Settings) -> dict:
    """Configuration state, reported only."""
    return {
        "lead_webhook_authenticated": bool(settings.tally_webhook_secret),
        "c_lead_webhook_authenticated": bool(settings.tally_c_webhook_secret),
        "solapi_configured": bool(settings.solapi_api_key and settings.solapi_api_secret),
    }


@router.get("/health/ready")
async def readiness_check(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    database = await _check_database(db)
    return {
        "status": "ready" if database["ok"] else "degraded",
        "checks": {"database": database},
        "configuration": _configuration(settings),
        "timestamp": _now(),
    }
