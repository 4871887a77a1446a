"""Domain models for the task tracker."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as a fixed-width, sortable ISO-8601 UTC string.

    Args:
        moment: Datetime to render; naive values are taken as UTC

    Returns:
        Timestamp such as ``2024-05-01T09:30:00.000000Z``
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class Task(BaseModel):
    """Task domain model.

    Timestamps are kept as ISO-8601 text so they compare in the same order
    as the moments they represent.
    """

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)

    id: str = Field(..., description="Unique task identifier")
    title: str = Field(..., min_length=1, description="Task title")
    description: str = Field(default="", description="Task description")
    completed: bool = Field(default=False, description="Whether the task is done")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    category: str = Field(default="general", description="Task category")
    created_at: str = Field(..., alias="createdAt", description="Task creation timestamp")
    updated_at: str = Field(..., alias="updatedAt", description="Task last update timestamp")
