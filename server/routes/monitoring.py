"""
Monitoring and health check API routes
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from config import config, get_logger
from database.db_postgres import Database
from server.dependencies import get_db
from server.metrics import get_metrics_text, metrics

logger = get_logger(__name__).bind(component="monitoring")

VERSION = "1.0.0"

router = APIRouter()


@router.get("/")
async def root():
    """API status and info"""
    return {
        "service": "cyclevote API",
        "status": "running",
        "version": VERSION,
        "description": "Employee of the Cycle voting - cycles, ballots, results and winner announcements",
        "endpoints": {
            "cycles": "GET /api/cycles - All cycles with participation stats",
            "create_cycle": "POST /api/cycles - Create a voting cycle",
            "cast": "POST /api/cycles/{id}/cast - Cast a ballot by employee code",
            "invite_cast": "POST /api/cycles/{id}/invite/{token}/cast - Cast a ballot from an invite link",
            "winners": "GET /api/cycles/{id}/winners - Per-store standings and winners",
            "history": "GET /api/cycles/winners/history - Winners of every ended cycle",
            "health": "GET /api/health - Health check",
            "metrics": "GET /metrics - Prometheus metrics",
        },
    }


@router.get("/api/health")
async def health_check(request: Request, db: Database = Depends(get_db)):
    """Health check endpoint"""
    health_status: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": VERSION,
        "checks": {},
    }

    try:
        await db.ping()
        health_status["checks"]["database"] = {"status": "healthy"}
    except Exception as e:
        logger.warning("database health check failed", error=str(e), error_type=type(e).__name__)
        metrics.record_error("database", e)
        health_status["checks"]["database"] = {"status": "unhealthy", "error": str(e)}
        health_status["status"] = "unhealthy"

    health_status["checks"]["email"] = {
        "status": "available" if getattr(request.app.state, "mailer", None) else "disabled",
    }

    health_status["checks"]["configuration"] = {
        "status": "healthy",
        "is_development": config.is_development(),
        "frontend_url": config.FRONTEND_URL,
    }

    return health_status


@router.get("/metrics")
async def prometheus_metrics():
    """Prometheus metrics endpoint"""
    try:
        return Response(content=get_metrics_text(), media_type="text/plain")
    except Exception as e:
        logger.error("error generating metrics", error=str(e), error_type=type(e).__name__)
        raise HTTPException(status_code=500, detail="Failed to generate metrics")
