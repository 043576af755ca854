"""
Health check endpoints.
The basic check backs deployment probes; the detailed one reports every
component plus host and process metrics.
"""

import os
import sys
import time
import psutil
from datetime import datetime, timezone
from typing import Dict, Any, List
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from pydantic import BaseModel

from ...db.session import get_db
from ...core.logger import logger
from ...core.config import Settings, get_settings

APP_VERSION = "1.0.0"

router = APIRouter()


class ComponentHealth(BaseModel):
    name: str
    status: str
    latency_ms: int
    details: Dict[str, Any]
    last_check: datetime


class DetailedHealthResponse(BaseModel):
    overall_status: str
    service_info: Dict[str, Any]
    components: List[ComponentHealth]
    system_metrics: Dict[str, Any]
    timestamp: datetime


# Application start time for uptime calculation
app_start_time = time.time()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def basic_health_check(
    db: Session = Depends(get_db), settings: Settings = Depends(get_settings)
):
    """
    Database connectivity plus required configuration.
    200 when healthy, 503 when the database is unreachable, 500 when
    required environment variables are missing.
    """
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database failure: {str(e)}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "message": "Database connection failed",
                "error": str(e),
                "timestamp": _now(),
            },
        )

    missing = settings.missing_required_env()
    if missing:
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "message": f"Missing environment variables: {', '.join(missing)}",
                "timestamp": _now(),
            },
        )

    return {
        "status": "healthy",
        "message": "Application is running properly",
        "timestamp": _now(),
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": "connected",
        "services": {
            "database": "ok",
            "ai": settings.available_ai_services(),
            "deepseek": "configured" if settings.DEEPSEEK_API_KEY else "missing",
            "auth": "configured" if settings.NEXTAUTH_SECRET else "missing",
        },
    }


@router.get("/detailed", response_model=DetailedHealthResponse)
def detailed_health_check(
    db: Session = Depends(get_db), settings: Settings = Depends(get_settings)
):
    components = [check_database_health(db), check_ai_services(settings)]
    overall_healthy = all(c.status == "healthy" for c in components)

    service_info = {
        "name": settings.APP_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "uptime_seconds": int(time.time() - app_start_time),
        "process_id": os.getpid(),
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}",
    }

    return DetailedHealthResponse(
        overall_status="healthy" if overall_healthy else "degraded",
        service_info=service_info,
        components=components,
        system_metrics=get_system_metrics(),
        timestamp=datetime.now(timezone.utc),
    )


def _component(name: str, status: str, started: float, **details) -> ComponentHealth:
    return ComponentHealth(
        name=name,
        status=status,
        latency_ms=int((time.perf_counter() - started) * 1000),
        details=details,
        last_check=datetime.now(timezone.utc),
    )


def check_database_health(db: Session) -> ComponentHealth:
    """Round-trip a trivial query; more than a second counts as degraded."""
    started = time.perf_counter()
    try:
        value = db.execute(text("SELECT 1")).scalar()
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return _component("database", "unhealthy", started, connection="failed", error=str(e))

    component = _component("database", "healthy", started, connection="ok", query_result=value)
    if component.latency_ms > 1000:
        component.status = "degraded"
    return component


def check_ai_services(settings: Settings) -> ComponentHealth:
    """Report which LLM providers are configured (no network call)"""
    started = time.perf_counter()
    services = settings.available_ai_services()
    return _component(
        "ai_services",
        "healthy" if services else "unhealthy",
        started,
        configured=services,
        deepseek_model=settings.DEEPSEEK_MODEL,
        missing_env=settings.missing_required_env(),
    )


def get_system_metrics() -> Dict[str, Any]:
    mb = 1024 * 1024
    try:
        memory = psutil.virtual_memory()
        disk = psutil.disk_usage("/")
        process = psutil.Process()
        with process.oneshot():
            rss = process.memory_info().rss
            threads = process.num_threads()
            open_files = len(process.open_files())
    except (psutil.Error, OSError) as e:
        logger.error(f"Collecting system metrics failed: {str(e)}")
        return {"error": str(e)}

    return {
        "system": {
            "cpu_usage_percent": psutil.cpu_percent(interval=None),
            "memory_usage_percent": memory.percent,
            "memory_available_mb": memory.available // mb,
            "disk_usage_percent": disk.percent,
        },
        "process": {
            "memory_usage_mb": rss // mb,
            "threads": threads,
            "open_files": open_files,
        },
        "uptime_seconds": int(time.time() - app_start_time),
    }
