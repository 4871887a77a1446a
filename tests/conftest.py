"""Shared test fixtures and configuration for the test suite."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import AsyncGenerator, Generator, Optional

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).parent.parent))

from tasktracker.config import Settings
from tasktracker.main import create_app
from tasktracker.services.task_service import TaskService
from tasktracker.store.task_store import TaskStore


class FakeClock:
    """Clock that moves forward by a fixed step every time it is read."""

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Create test settings pointing at a temporary database."""
    return Settings(
        database_path=tmp_path / "tasks.db",
        log_level="DEBUG",
        environment="test",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def task_store(tmp_path) -> AsyncGenerator[TaskStore, None]:
    """Create a connected task store on a temporary database."""
    store = TaskStore(tmp_path / "tasks.db")
    await store.connect()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def task_service(task_store, clock) -> TaskService:
    """Create a task service over the temporary store."""
    return TaskService(task_store, clock=clock)


@pytest.fixture
def client(test_settings) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client


# Test data fixtures
@pytest.fixture
def sample_task_data():
    """Sample task data for testing."""
    return {
        "title": "Write report",
        "description": "Quarterly numbers",
        "priority": "high",
        "category": "work",
    }
