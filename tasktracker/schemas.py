"""API request/response schemas for the task tracker."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models.task import TaskPriority


class TaskCreate(BaseModel):
    """Schema for creating a new task."""
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    priority: Optional[TaskPriority] = Field(None, description="Task priority")
    category: Optional[str] = Field(None, description="Task category")


class TaskUpdate(BaseModel):
    """Schema for partially updating an existing task.

    Only fields present in the request body with a non-null value are
    applied; unknown fields are ignored.
    """
    title: Optional[str] = Field(None, description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    completed: Optional[bool] = Field(None, description="Completion status")
    priority: Optional[TaskPriority] = Field(None, description="Task priority")
    category: Optional[str] = Field(None, description="Task category")

    def changes(self) -> Dict[str, Any]:
        """Fields supplied by the caller, keyed by field name."""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True, mode="json").items()
            if value is not None
        }


class TaskResponse(BaseModel):
    """Schema for task API responses."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., description="Unique task identifier")
    title: str = Field(..., description="Task title")
    description: str = Field("", description="Task description")
    completed: bool = Field(..., description="Completion status")
    priority: TaskPriority = Field(..., description="Task priority")
    category: str = Field(..., description="Task category")
    created_at: str = Field(..., alias="createdAt", description="Task creation timestamp")
    updated_at: str = Field(..., alias="updatedAt", description="Task last update timestamp")


class ErrorResponse(BaseModel):
    """Schema for error responses."""
    error: str = Field(..., description="Error message")
    status_code: int = Field(..., description="HTTP status code")
    path: str = Field(..., description="Requested URL")


class HealthResponse(BaseModel):
    """Schema for health check responses."""
    status: str = Field(default="healthy", description="Service health status")
    timestamp: str = Field(..., description="Health check timestamp")
    version: str = Field(default="1.0.0", description="Application version")
    services: Dict[str, str] = Field(default_factory=dict, description="Component status")
    task_count: Optional[int] = Field(None, description="Number of stored tasks")
