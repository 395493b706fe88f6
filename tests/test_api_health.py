"""
Tests for admitlead/api/health.py - liveness and readiness.
"""
from datetime import datetime
from unittest.mock import AsyncMock

from admitlead.api.health import health_check, readiness_check
from admitlead.config import Settings


class TestHealthCheck:
    async def test_returns_healthy(self):
        """Liveness check always returns healthy with timestamp and version."""
        result = await health_check()
        assert result["status"] == "healthy"
        assert result["version"] == "1.0.0"
        assert datetime.fromisoformat(result["timestamp"]).tzinfo is not None


class TestReadinessCheck:
    async def test_database_reachable(self):
        mock_db = AsyncMock()
        result = await readiness_check(db=mock_db, settings=Settings())

        assert result["status"] == "ready"
        assert result["checks"]["database"]["ok"] is True
        assert "latency_ms" in result["checks"]["database"]
        mock_db.execute.assert_awaited_once()

    async def test_database_down_is_degraded(self):
        mock_db = AsyncMock()
        mock_db.execute = AsyncMock(side_effect=ConnectionError("refused"))
        result = await readiness_check(db=mock_db, settings=Settings())

        assert result["status"] == "degraded"
        assert result["checks"]["database"] == {"ok": False, "error": "ConnectionError"}

    async def test_reports_webhook_authentication(self):
        settings = Settings(
            tally_webhook_secret="s3cret", tally_c_webhook_secret="",
            solapi_api_key="k", solapi_api_secret="",
        )
        result = await readiness_check(db=AsyncMock(), settings=settings)

        assert result["configuration"] == {
            "lead_webhook_authenticated": True,
            "c_lead_webhook_authenticated": False,
            "solapi_configured": False,
        }

    async def test_against_sqlite(self, db):
        result = await readiness_check(db=db, settings=Settings())
        assert result["status"] == "ready"
