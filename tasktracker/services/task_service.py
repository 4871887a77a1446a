"""Task service for CRUD operations over the task store."""

import logging
from datetime import datetime
from typing import Callable, List, Optional
from uuid import uuid4

from ..errors import ValidationError
from ..models.task import Task, TaskPriority, format_timestamp, utc_now
from ..schemas import TaskCreate, TaskUpdate
from ..store.task_store import TaskStore

logger = logging.getLogger(__name__)


class TaskService:
    """Service for task CRUD operations.

    The service keeps no state of its own; every call is a round trip to
    the injected store. It is the only place where task ids and
    timestamps are generated.
    """

    def __init__(self, store: TaskStore, clock: Callable[[], datetime] = utc_now):
        """Initialize the task service.

        Args:
            store: Connected task store
            clock: Returns the current time; replaceable in tests
        """
        self.store = store
        self._clock = clock
        logger.info("Task service initialized")

    def _now(self) -> str:
        return format_timestamp(self._clock())

    @staticmethod
    def _clean_title(title: Optional[str]) -> str:
        if title is None or not title.strip():
            raise ValidationError("Title is required", field="title")
        return title.strip()

    async def list_tasks(self) -> List[Task]:
        """List all tasks.

        Returns:
            Tasks ordered newest first
        """
        tasks = await self.store.list_all()
        logger.debug(f"Listed {len(tasks)} tasks")
        return tasks

    async def get_task(self, task_id: str) -> Optional[Task]:
        """Get a task by ID.

        Args:
            task_id: Task ID

        Returns:
            Task if found, None otherwise
        """
        task = await self.store.find_by_id(task_id)
        if task is None:
            logger.debug(f"Task {task_id} not found")
        return task

    async def create_task(self, task_data: TaskCreate) -> Task:
        """Create a new task.

        Args:
            task_data: Task creation data

        Returns:
            Created task

        Raises:
            ValidationError: If the title is empty or blank
        """
        title = self._clean_title(task_data.title)
        now = self._now()

        task = Task(
            id=str(uuid4()),
            title=title,
            description=task_data.description or "",
            completed=False,
            priority=task_data.priority or TaskPriority.MEDIUM,
            category=task_data.category or "general",
            created_at=now,
            updated_at=now,
        )

        await self.store.insert(task)

        logger.info(f"Created task {task.id}: {task.title}")
        return task

    async def update_task(self, task_id: str, task_data: TaskUpdate) -> Optional[Task]:
        """Apply a partial update to a task.

        Args:
            task_id: Task ID
            task_data: Fields to change; fields left out stay untouched

        Returns:
            Updated task if found, None otherwise

        Raises:
            ValidationError: If the update would leave the title blank
        """
        changes = task_data.changes()
        if "title" in changes:
            changes["title"] = self._clean_title(changes["title"])

        changed = await self.store.apply_partial_update(task_id, changes, self._now())
        if changed == 0:
            logger.warning(f"Task {task_id} not found for update")
            return None

        task = await self.store.find_by_id(task_id)
        logger.info(f"Updated task {task_id} fields: {sorted(changes) or 'none'}")
        return task

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task.

        Args:
            task_id: Task ID

        Returns:
            True if task was deleted, False if not found
        """
        deleted = await self.store.delete(task_id)
        if deleted:
            logger.info(f"Deleted task {task_id}")
        else:
            logger.warning(f"Task {task_id} not found for deletion")
        return deleted
