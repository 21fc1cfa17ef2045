"""
Health Endpoints
Detailed process health for operators plus an unauthenticated liveness probe
"""

import time
from typing import Any, Dict, Tuple

import psutil
import structlog
from fastapi import APIRouter, Depends

from pathway_tracker import __version__
from pathway_tracker.core.database import check_database_health
from pathway_tracker.core.deps import require_permission
from pathway_tracker.core.enforcement import Principal
from pathway_tracker.core.rbac import Permission
from pathway_tracker.schemas.base import HealthReport, HealthStatus

logger = structlog.get_logger()
router = APIRouter()

_SEVERITY = [HealthStatus.HEALTHY, HealthStatus.DEGRADED, HealthStatus.UNHEALTHY]

# usage percent at which a resource is graded (degraded, unhealthy)
THRESHOLDS = {
    "memory": (90.0, 95.0),
    "cpu": (80.0, 95.0),
    "disk": (85.0, 95.0),
}

GB = 1024 ** 3

Check = Tuple[HealthStatus, Dict[str, Any]]


def _grade(resource: str, percent: float) -> HealthStatus:
    degraded_at, unhealthy_at = THRESHOLDS[resource]
    if percent >= unhealthy_at:
        return HealthStatus.UNHEALTHY
    if percent >= degraded_at:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


async def _database() -> Check:
    started = time.perf_counter()
    healthy = await check_database_health()
    state = HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY
    return state, {"response_time_ms": round((time.perf_counter() - started) * 1000, 2)}


def _memory() -> Check:
    memory = psutil.virtual_memory()
    return _grade("memory", memory.percent), {
        "usage_percent": memory.percent,
        "available_gb": round(memory.available / GB, 2),
    }


def _cpu() -> Check:
    percent = psutil.cpu_percent(interval=0.1)
    return _grade("cpu", percent), {"usage_percent": percent}


def _disk() -> Check:
    disk = psutil.disk_usage("/")
    return _grade("disk", disk.percent), {
        "usage_percent": disk.percent,
        "free_gb": round(disk.free / GB, 2),
    }


@router.get("/", response_model=HealthReport)
async def health_check(
    principal: Principal = Depends(require_permission(Permission.SYSTEM_VIEW_HEALTH))
) -> HealthReport:
    """
    Database, memory, CPU and disk checks

    The overall status is the worst status of any single check.
    """
    results: Dict[str, Check] = {"database": await _database()}
    for name, probe in (("memory", _memory), ("cpu", _cpu), ("disk", _disk)):
        try:
            results[name] = probe()
        except (OSError, psutil.Error) as e:
            logger.error("Health probe failed", probe=name, error=str(e))
            results[name] = (HealthStatus.UNHEALTHY, {"error": str(e)})

    overall = max((state for state, _ in results.values()), key=_SEVERITY.index)
    if overall != HealthStatus.HEALTHY:
        logger.warning("Service health degraded", status=overall.value)

    return HealthReport(
        status=overall,
        service="pathway-tracker-api",
        version=__version__,
        checks={name: {"status": state, **details} for name, (state, details) in results.items()},
    )


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    return {"status": "alive", "timestamp": time.time()}
