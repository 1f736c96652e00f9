"""
System endpoints - task introspection and health

Mounted under /api/system; protected like the LED routes when auth is on.
"""

from fastapi import APIRouter, Depends, Query
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone
from lifecycle.task_registry import TaskCategory, TaskRecord, TaskRegistry
from services.service_container import ServiceContainer
from utils.logger import get_logger, LogCategory
from api.dependencies import get_service_container
from api.middleware.auth import require_api_key
from api.middleware.error_handler import DomainError

log = get_logger().for_category(LogCategory.API)

router = APIRouter(prefix="/system", tags=["System"], dependencies=[Depends(require_api_key)])


def _listing(records: List[TaskRecord]) -> Dict[str, Any]:
    return {"count": len(records), "tasks": [r.to_dict() for r in records]}


@router.get("/tasks/summary")
async def get_task_summary() -> Dict[str, Any]:
    """Task counts plus a one-line summary"""
    registry = TaskRegistry.instance()
    return {"summary": registry.summary(), **registry.counts()}


@router.get("/tasks")
async def get_all_tasks(category: Optional[str] = Query(None)) -> Dict[str, Any]:
    """
    Every tracked task, optionally filtered by category (API, SESSION, ...).

    Each animation session adds a protocol reader and a stderr forwarder
    under SESSION.
    """
    registry = TaskRegistry.instance()
    if category is None:
        return _listing(registry.list_all())

    try:
        selected = TaskCategory[category.upper()]
    except KeyError:
        raise DomainError(
            code="INVALID_TASK_CATEGORY",
            message=f"Unknown task category '{category}'",
            details={"categories": [c.name for c in TaskCategory]},
        ) from None
    return _listing(registry.by_category(selected))


@router.get("/tasks/active")
async def get_active_tasks() -> Dict[str, Any]:
    """Running tasks, oldest first, with how long they have been running"""
    now = datetime.now(timezone.utc)
    records = sorted(TaskRegistry.instance().active(), key=lambda r: r.info.created_at)

    tasks = []
    for record in records:
        entry = record.to_dict()
        started = datetime.fromisoformat(record.info.created_at)
        entry["running_for_seconds"] = round((now - started).total_seconds(), 2)
        tasks.append(entry)
    return {"count": len(tasks), "tasks": tasks}


@router.get("/tasks/failed")
async def get_failed_tasks() -> Dict[str, Any]:
    return _listing(TaskRegistry.instance().failed())


@router.get("/health")
async def health_check(services: ServiceContainer = Depends(get_service_container)) -> Dict[str, Any]:
    """
    Health with task statistics, strip and animation state.

    status is "degraded" once any tracked task has failed.
    """
    registry = TaskRegistry.instance()
    counts = registry.counts()
    session = services.sessions.session

    degraded = counts["failed"] > 0
    return {
        "status": "degraded" if degraded else "healthy",
        "reason": f"{counts['failed']} background task(s) have failed" if degraded else None,
        "strip": {
            "led_count": services.surface.led_count,
            "driver": type(services.surface.strip).__name__,
            "brightness": services.sessions.get_brightness(),
        },
        "animation": {
            "running": session is not None,
            "pid": session.pid if session is not None else None,
        },
        "tasks": counts,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
