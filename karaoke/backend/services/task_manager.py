"""Background jobs (song generation, song upload) with WebSocket progress broadcast."""

from __future__ import annotations

import asyncio
import threading
import time
import traceback
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from karaoke.backend import config

# Finished jobs are kept this long so clients can still poll their result.
FINISHED_TASK_TTL_SECONDS = 3600


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class Task:
    id: str
    kind: str
    status: TaskStatus = TaskStatus.PENDING
    progress: float = 0.0
    message: str = ""
    result: Optional[Any] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None  # Full traceback when verbose errors enabled
    created_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None


class TaskManager:
    """Runs jobs one at a time on a worker thread and pushes their progress to subscribers.

    Only sockets subscribed to a task receive its messages; results can
    carry another user's data, so nothing is fanned out to every client.

    Jobs receive their task id as first argument so they can report progress
    through :meth:`update_progress`. Whatever the job returns becomes the
    task result; an exception marks the task as failed.
    """

    def __init__(self, max_workers: int = 1):
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        self._tasks: Dict[str, Task] = {}
        self._ws_connections: Dict[str, List[Any]] = {}  # task_id -> [websockets]
        self._lock = threading.Lock()  # guards _tasks and _ws_connections
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def set_event_loop(self, loop: asyncio.AbstractEventLoop):
        """Store a reference to the main event loop for thread-safe broadcasts."""
        self._loop = loop

    def submit(self, kind: str, fn: Callable, *args, **kwargs) -> str:
        self.cleanup_old_tasks()
        task_id = uuid.uuid4().hex[:12]
        task = Task(id=task_id, kind=kind)
        with self._lock:
            self._tasks[task_id] = task
        logger.info(f"[tasks] Queued {kind} task {task_id}")

        def _run():
            task.status = TaskStatus.RUNNING
            self._broadcast_sync(task_id, {
                "type": "status",
                "task_id": task_id,
                "kind": kind,
                "status": TaskStatus.RUNNING.value,
            })
            try:
                task.result = fn(task_id, *args, **kwargs)
                task.status = TaskStatus.COMPLETED
                task.progress = 1.0
                self._broadcast_sync(task_id, {
                    "type": "completed",
                    "task_id": task_id,
                    "kind": kind,
                    "result": task.result,
                })
            except Exception as e:
                logger.exception(f"[tasks] {kind} task {task_id} failed")
                task.status = TaskStatus.ERROR
                task.error = str(e)
                tb = traceback.format_exc()
                if config.VERBOSE_ERRORS:
                    task.error_detail = tb
                self._broadcast_sync(task_id, {
                    "type": "error",
                    "task_id": task_id,
                    "kind": kind,
                    "error": str(e),
                    **({"error_detail": tb} if config.VERBOSE_ERRORS else {}),
                })
            finally:
                task.finished_at = time.time()

        self._executor.submit(_run)
        return task_id

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._lock:
            return self._tasks.get(task_id)

    def active_count(self, kind: Optional[str] = None) -> int:
        with self._lock:
            tasks = list(self._tasks.values())
        return sum(
            1 for t in tasks
            if t.status in (TaskStatus.PENDING, TaskStatus.RUNNING)
            and (kind is None or t.kind == kind)
        )

    def update_progress(self, task_id: str, progress: float, message: str = ""):
        task = self.get_task(task_id)
        if task:
            task.progress = progress
            task.message = message
            self._broadcast_sync(task_id, {
                "type": "progress",
                "task_id": task_id,
                "progress": progress,
                "message": message,
            })

    def register_ws(self, ws, task_id: str):
        """Subscribe ``ws`` to one task; subscribing twice is a no-op."""
        with self._lock:
            conns = self._ws_connections.setdefault(task_id, [])
            if ws not in conns:
                conns.append(ws)

    def unregister_ws(self, ws):
        with self._lock:
            for conns in self._ws_connections.values():
                if ws in conns:
                    conns.remove(ws)

    def _broadcast_sync(self, task_id: str, data: dict):
        """Send data to the task's subscribers, safe to call from any thread."""
        with self._lock:
            targets = list(self._ws_connections.get(task_id, []))
        loop = self._loop
        if not targets or loop is None or loop.is_closed():
            return
        for ws in targets:
            try:
                asyncio.run_coroutine_threadsafe(ws.send_json(data), loop)
            except RuntimeError as e:
                logger.debug(f"[tasks] Dropped broadcast for {task_id}: {e}")

    def shutdown(self):
        self._executor.shutdown(wait=False)

    def cleanup_old_tasks(self, max_age_seconds: int = FINISHED_TASK_TTL_SECONDS):
        now = time.time()
        with self._lock:
            expired = [tid for tid, t in self._tasks.items()
                       if t.finished_at is not None
                       and now - t.finished_at > max_age_seconds]
            for tid in expired:
                del self._tasks[tid]
                self._ws_connections.pop(tid, None)
        if expired:
            logger.debug(f"[tasks] Dropped {len(expired)} finished tasks")


task_manager = TaskManager()
