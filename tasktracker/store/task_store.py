"""SQLite persistence for tasks."""

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiosqlite

from ..errors import ConstraintViolation, StoreError
from ..models.task import Task

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT,
        completed BOOLEAN DEFAULT 0,
        priority TEXT DEFAULT 'medium',
        category TEXT DEFAULT 'general',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
"""

# Fields a partial update may touch, mapped to their column names.
UPDATABLE_COLUMNS = {
    "title": "title",
    "description": "description",
    "completed": "completed",
    "priority": "priority",
    "category": "category",
}


class TaskStore:
    """Task store backed by a single aiosqlite connection.

    The connection is opened by ``connect()`` and released by ``close()``;
    the store can also be used as an async context manager. Writes hold
    ``_write_lock`` from execute to commit or rollback, so a rollback never
    discards another coroutine's uncommitted statement on the shared
    connection.
    """

    def __init__(self, db_path: Union[str, Path] = "tasks.db"):
        """Initialize the task store.

        Args:
            db_path: Path of the SQLite database file, or ``:memory:``
        """
        self.db_path = str(db_path)
        self._db: Optional[aiosqlite.Connection] = None
        self._write_lock = asyncio.Lock()

    async def __aenter__(self) -> "TaskStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_connected(self) -> bool:
        return self._db is not None

    async def connect(self) -> None:
        """Open the database connection and make sure the schema exists."""
        if self._db is not None:
            return

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self._db = await aiosqlite.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Could not open database {self.db_path}: {e}") from e

        self._db.row_factory = aiosqlite.Row
        await self.ensure_schema()
        logger.info(f"Task store connected to {self.db_path}")

    async def close(self) -> None:
        """Close the database connection if it is open."""
        if self._db is None:
            return
        await self._db.close()
        self._db = None
        logger.info(f"Task store at {self.db_path} closed")

    def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StoreError("Task store is not connected")
        return self._db

    async def ensure_schema(self) -> None:
        """Create the tasks table if it does not exist yet."""
        db = self._conn()
        async with self._write_lock:
            try:
                await db.execute(CREATE_TABLE_SQL)
                await db.commit()
            except sqlite3.Error as e:
                raise StoreError(f"Error creating tasks table: {e}") from e
        logger.debug("Tasks table ready")

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        return Task(
            id=row["id"],
            title=row["title"],
            description=row["description"] or "",
            completed=bool(row["completed"]),
            priority=row["priority"],
            category=row["category"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    async def list_all(self) -> List[Task]:
        """Return every task, newest first.

        Returns:
            Tasks ordered by creation timestamp descending
        """
        db = self._conn()
        try:
            async with db.execute(
                "SELECT * FROM tasks ORDER BY created_at DESC, rowid DESC"
            ) as cursor:
                rows = await cursor.fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Error listing tasks: {e}") from e

        return [self._row_to_task(row) for row in rows]

    async def insert(self, task: Task) -> None:
        """Persist a fully-populated task.

        Args:
            task: Task to insert

        Raises:
            ConstraintViolation: If a task with the same id already exists
            StoreError: If the write fails for any other reason
        """
        db = self._conn()
        async with self._write_lock:
            try:
                await db.execute(
                    """
                    INSERT INTO tasks (id, title, description, completed, priority, category, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        task.id,
                        task.title,
                        task.description,
                        int(task.completed),
                        task.priority,
                        task.category,
                        task.created_at,
                        task.updated_at,
                    ),
                )
                await db.commit()
            except sqlite3.IntegrityError as e:
                await db.rollback()
                raise ConstraintViolation(f"Task {task.id} violates a constraint: {e}") from e
            except sqlite3.Error as e:
                raise StoreError(f"Error inserting task {task.id}: {e}") from e

    async def find_by_id(self, task_id: str) -> Optional[Task]:
        """Get a task by ID.

        Args:
            task_id: Task ID

        Returns:
            Task if found, None otherwise
        """
        db = self._conn()
        try:
            async with db.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)) as cursor:
                row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Error reading task {task_id}: {e}") from e

        if row is None:
            return None
        return self._row_to_task(row)

    async def apply_partial_update(
        self, task_id: str, fieldset: Dict[str, Any], updated_at: str
    ) -> int:
        """Update only the given fields of a task, plus its update timestamp.

        Args:
            task_id: Task ID
            fieldset: Field names mapped to their new values
            updated_at: New value of the update timestamp

        Returns:
            Number of rows changed (0 when the task does not exist)

        Raises:
            ValueError: If ``fieldset`` names a field that cannot be updated
        """
        unknown = set(fieldset) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Cannot update task fields: {', '.join(sorted(unknown))}")

        set_clause = []
        values: List[Any] = []
        for field, value in fieldset.items():
            set_clause.append(f"{UPDATABLE_COLUMNS[field]} = ?")
            values.append(int(value) if field == "completed" else value)

        set_clause.append("updated_at = ?")
        values.append(updated_at)
        values.append(task_id)

        db = self._conn()
        async with self._write_lock:
            try:
                cursor = await db.execute(
                    f"UPDATE tasks SET {', '.join(set_clause)} WHERE id = ?", values
                )
                await db.commit()
            except sqlite3.Error as e:
                raise StoreError(f"Error updating task {task_id}: {e}") from e

        return cursor.rowcount

    async def delete(self, task_id: str) -> bool:
        """Delete a task.

        Args:
            task_id: Task ID

        Returns:
            True if a row was removed, False if the task did not exist
        """
        db = self._conn()
        async with self._write_lock:
            try:
                cursor = await db.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
                await db.commit()
            except sqlite3.Error as e:
                raise StoreError(f"Error deleting task {task_id}: {e}") from e

        return cursor.rowcount > 0

    async def count(self) -> int:
        """Number of stored tasks."""
        db = self._conn()
        try:
            async with db.execute("SELECT COUNT(*) FROM tasks") as cursor:
                row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Error counting tasks: {e}") from e
        return row[0]
