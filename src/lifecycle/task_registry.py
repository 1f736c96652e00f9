"""
Task Registry
-------------

Every long-lived asyncio task of the server is created through
create_tracked_task() so it can be listed (/api/system/tasks), watched by
the shutdown coordinator and cancelled at exit.

Tasks per process:
- API: one per uvicorn server (control plane, registration confirmation)
- SESSION: protocol reader and stderr forwarder of each animation session
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime, timezone

from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.TASK)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TaskCategory(Enum):
    """Logical grouping of asynchronous tasks."""
    API = auto()
    SESSION = auto()      # runtime protocol reader, stderr forwarder
    SOCKETIO = auto()
    SYSTEM = auto()
    BACKGROUND = auto()


@dataclass(frozen=True)
class TaskInfo:
    """Metadata captured at task creation time."""
    id: int
    category: TaskCategory
    description: str
    created_at: str  # ISO UTC string


@dataclass
class TaskRecord:
    task: asyncio.Task
    info: TaskInfo
    cancelled: bool = False
    finished_with_error: Optional[BaseException] = None
    finished_at: Optional[str] = None

    @property
    def status(self) -> str:
        if not self.task.done():
            return "running"
        if self.cancelled:
            return "cancelled"
        if self.finished_with_error is not None:
            return "failed"
        return "completed"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.info.id,
            "category": self.info.category.name,
            "description": self.info.description,
            "created_at": self.info.created_at,
            "status": self.status,
        }
        if self.finished_at:
            data["finished_at"] = self.finished_at
        if self.finished_with_error is not None:
            data["error"] = str(self.finished_with_error)
            data["error_type"] = type(self.finished_with_error).__name__
        return data


class TaskRegistry:
    """
    Process-wide registry of tracked tasks.

    Finished records stay listed for introspection until `history_limit`
    records exist; then the oldest finished ones are dropped. Running tasks
    are never dropped.
    """

    _instance: Optional["TaskRegistry"] = None

    def __init__(self, history_limit: int = 200) -> None:
        self._records: Dict[int, TaskRecord] = {}
        self._by_task: Dict[asyncio.Task, int] = {}
        self._next_id = 1
        self._history_limit = history_limit

    @classmethod
    def instance(cls) -> "TaskRegistry":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, task: asyncio.Task, category: TaskCategory, description: str) -> int:
        task_id = self._next_id
        self._next_id += 1

        info = TaskInfo(id=task_id, category=category, description=description, created_at=_now())
        self._records[task_id] = TaskRecord(task=task, info=info)
        self._by_task[task] = task_id

        log.debug(f"[Task {task_id}] {category.name} - {description}")

        task.add_done_callback(self._on_task_done)
        self._prune()
        return task_id

    def _on_task_done(self, task: asyncio.Task) -> None:
        record = self.get_record(task)
        if record is None:
            return
        record.finished_at = _now()

        if task.cancelled():
            record.cancelled = True
            log.debug(f"[Task {record.info.id}] cancelled - {record.info.description}")
            return

        # Reading the exception here also keeps asyncio from reporting it as never retrieved
        exc = task.exception()
        if exc is None:
            log.debug(f"[Task {record.info.id}] completed - {record.info.description}")
            return

        record.finished_with_error = exc
        log.error(f"[Task {record.info.id}] FAILED - {record.info.description}", exception=exc)

    def get_record(self, task: asyncio.Task) -> Optional[TaskRecord]:
        task_id = self._by_task.get(task)
        return self._records.get(task_id) if task_id is not None else None

    def _prune(self) -> None:
        overflow = len(self._records) - self._history_limit
        if overflow <= 0:
            return
        finished = [tid for tid, r in self._records.items() if r.task.done()]
        for task_id in finished[:overflow]:
            record = self._records.pop(task_id)
            self._by_task.pop(record.task, None)

    # === Queries ===

    def list_all(self) -> List[TaskRecord]:
        return list(self._records.values())

    def active(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if not r.task.done()]

    def failed(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.finished_with_error is not None]

    def cancelled(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.cancelled]

    def by_category(self, category: TaskCategory) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.info.category is category]

    def counts(self) -> Dict[str, int]:
        return {
            "total": len(self._records),
            "active": len(self.active()),
            "failed": len(self.failed()),
            "cancelled": len(self.cancelled()),
        }

    def summary(self) -> str:
        counts = self.counts()
        return f"Tasks: total={counts['total']}, running={counts['active']}, failed={counts['failed']}"

    # === Shutdown ===

    def get_tasks_for_shutdown(self, exclude: Optional[Iterable[asyncio.Task]] = None) -> List[asyncio.Task]:
        """Still-running tracked tasks, minus `exclude`"""
        excluded = set(exclude or ())
        return [r.task for r in self.active() if r.task not in excluded]

    async def cancel_remaining(self, timeout: float = 2.0) -> int:
        """
        Cancel every tracked task still running after the shutdown handlers

        Returns:
            Number of tasks cancelled
        """
        current = asyncio.current_task()
        tasks = self.get_tasks_for_shutdown(exclude=[current] if current else None)
        if not tasks:
            return 0

        log.debug(f"Cancelling {len(tasks)} remaining task(s)")
        for task in tasks:
            task.cancel()
        await asyncio.wait(tasks, timeout=timeout)
        return len(tasks)


def create_tracked_task(
    coro,
    *,
    category: TaskCategory,
    description: str,
    loop: Optional[asyncio.AbstractEventLoop] = None
) -> asyncio.Task:
    """Create a task and register it in one call."""
    loop = loop or asyncio.get_running_loop()
    task = loop.create_task(coro, name=description)
    TaskRegistry.instance().register(task=task, category=category, description=description)
    return task
