"""
Background execution of deployments.

Endpoints answer as soon as configuration is persisted; the deployment
itself keeps running as an asyncio task. Each task gets a handle that
records its status and result, and its outcome is published as a domain
event so nothing depends on a caller awaiting it.

Usage:
    runner = DeploymentTaskRunner()

    task = runner.dispatch("nlq", port=3002)
    ...
    runner.get(task.id).status
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from nlq_dashboard.core.config import settings
from nlq_dashboard.core.events import (
    DeploymentCompletedEvent,
    DeploymentFailedEvent,
    DeploymentRequestedEvent,
    event_dispatcher,
)
from nlq_dashboard.core.exceptions import DeploymentTaskNotFoundError
from nlq_dashboard.services.deployment.deployment_client import (
    DeploymentClient,
    deployment_client,
)
from nlq_dashboard.services.deployment.executor_base import DeploymentResult

logger = logging.getLogger(__name__)


class DeploymentTaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DeploymentTask:
    """Handle for one background deployment."""

    system: str
    port: Optional[int] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: DeploymentTaskStatus = DeploymentTaskStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None
    result: Optional[DeploymentResult] = None

    @property
    def done(self) -> bool:
        return self.status in (DeploymentTaskStatus.SUCCEEDED, DeploymentTaskStatus.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "system": self.system,
            "port": self.port,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
            "result": self.result.to_dict() if self.result else None,
        }


class DeploymentTaskRunner:
    """
    Runs deployments in the background and keeps their handles.

    Unfinished handles are always kept; only the newest ``max_finished``
    finished ones are. In-flight deployments cannot be cancelled; the client
    timeout is their only bound.
    """

    def __init__(self, client: DeploymentClient = None, max_finished: int = None):
        self.client = client or deployment_client
        if max_finished is None:
            max_finished = settings.DEPLOYMENT_MAX_FINISHED_TASKS
        self.max_finished = max_finished
        self._tasks: Dict[str, DeploymentTask] = {}
        self._futures: Dict[str, asyncio.Task] = {}

    def dispatch(self, system: str, port: Optional[int] = None) -> DeploymentTask:
        """
        Start a deployment without waiting for it.

        Must be called from within a running event loop.

        Returns:
            The task handle, status PENDING
        """
        task = DeploymentTask(system=system, port=port)
        self._tasks[task.id] = task
        event_dispatcher.dispatch(DeploymentRequestedEvent(task_id=task.id, system=system, port=port))

        future = asyncio.get_running_loop().create_task(self._run(task))
        self._futures[task.id] = future
        future.add_done_callback(lambda _: self._futures.pop(task.id, None))
        return task

    async def _run(self, task: DeploymentTask) -> DeploymentTask:
        task.status = DeploymentTaskStatus.RUNNING
        try:
            result = await self.client.deploy(task.system, port=task.port)
        except Exception as e:
            logger.exception(f"Deployment {task.id} of '{task.system}' raised: {e}")
            result = DeploymentResult.failed(task.system, str(e) or e.__class__.__name__)

        task.result = result
        task.finished_at = _utcnow()
        self._prune_finished()
        if result.success:
            task.status = DeploymentTaskStatus.SUCCEEDED
            await event_dispatcher.dispatch_async(DeploymentCompletedEvent(
                task_id=task.id,
                system=task.system,
                stdout=result.stdout,
            ))
        else:
            task.status = DeploymentTaskStatus.FAILED
            await event_dispatcher.dispatch_async(DeploymentFailedEvent(
                task_id=task.id,
                system=task.system,
                message=result.message,
                stderr=result.stderr,
                compose_path=result.compose_path,
            ))
        return task

    def _prune_finished(self) -> None:
        finished = sorted(
            (t for t in self._tasks.values() if t.finished_at is not None),
            key=lambda t: t.finished_at,
        )
        for task in finished[:max(len(finished) - self.max_finished, 0)]:
            del self._tasks[task.id]

    def get(self, task_id: str) -> DeploymentTask:
        """
        Look up a task handle.

        Raises:
            DeploymentTaskNotFoundError: If no task has this id
        """
        task = self._tasks.get(task_id)
        if task is None:
            raise DeploymentTaskNotFoundError(task_id)
        return task

    def list_tasks(self) -> List[DeploymentTask]:
        """All task handles, newest first."""
        return sorted(self._tasks.values(), key=lambda t: t.created_at, reverse=True)

    def pending_count(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done)

    async def wait(self, task_id: str) -> DeploymentTask:
        """Wait for a task to finish and return its handle."""
        task = self.get(task_id)
        future = self._futures.get(task_id)
        if future is not None:
            await asyncio.shield(future)
        return task
