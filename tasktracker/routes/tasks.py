"""Task management CRUD routes."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..deps import get_task_service
from ..errors import StoreError, ValidationError
from ..models.task import Task
from ..schemas import ErrorResponse, TaskCreate, TaskResponse, TaskUpdate
from ..services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    responses={500: {"model": ErrorResponse, "description": "Store failure"}},
)

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Task not found"}}
BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Invalid request body"}}


def to_response(task: Task) -> TaskResponse:
    """Convert a domain task into its API representation."""
    return TaskResponse(**task.model_dump())


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    task_service: TaskService = Depends(get_task_service)
) -> List[TaskResponse]:
    """List all tasks, newest first.

    Args:
        task_service: Task service instance

    Returns:
        List of task responses
    """
    try:
        tasks = await task_service.list_tasks()
        return [to_response(task) for task in tasks]

    except StoreError as e:
        logger.error(f"Error fetching tasks: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch tasks"
        )


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST,
)
async def create_task(
    task_data: TaskCreate,
    task_service: TaskService = Depends(get_task_service)
) -> TaskResponse:
    """Create a new task.

    Args:
        task_data: Task creation data
        task_service: Task service instance

    Returns:
        Created task response

    Raises:
        HTTPException: If the title is blank or the task cannot be stored
    """
    try:
        logger.info(f"Creating new task: {task_data.title}")

        task = await task_service.create_task(task_data)
        return to_response(task)

    except ValidationError as e:
        logger.warning(f"Validation error creating task: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except StoreError as e:
        logger.error(f"Error creating task: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create task"
        )


@router.get("/{task_id}", response_model=TaskResponse, responses=NOT_FOUND)
async def get_task(
    task_id: str,
    task_service: TaskService = Depends(get_task_service)
) -> TaskResponse:
    """Get a specific task by ID."""
    try:
        task = await task_service.get_task(task_id)

    except StoreError as e:
        logger.error(f"Error fetching task {task_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch task"
        )

    if task is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )
    return to_response(task)


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    responses={**BAD_REQUEST, **NOT_FOUND},
)
async def update_task(
    task_id: str,
    task_data: Optional[TaskUpdate] = None,
    task_service: TaskService = Depends(get_task_service)
) -> TaskResponse:
    """Partially update a task.

    Args:
        task_id: Task ID
        task_data: Fields to change; a missing body only refreshes the update timestamp
        task_service: Task service instance

    Returns:
        Updated task response

    Raises:
        HTTPException: If task not found or update fails
    """
    try:
        logger.info(f"Updating task: {task_id}")

        task = await task_service.update_task(task_id, task_data or TaskUpdate())

    except ValidationError as e:
        logger.warning(f"Validation error updating task {task_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except StoreError as e:
        logger.error(f"Error updating task {task_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update task"
        )

    if task is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )
    return to_response(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
async def delete_task(
    task_id: str,
    task_service: TaskService = Depends(get_task_service)
) -> Response:
    """Delete a task.

    Args:
        task_id: Task ID
        task_service: Task service instance

    Raises:
        HTTPException: If task not found
    """
    try:
        logger.info(f"Deleting task: {task_id}")

        deleted = await task_service.delete_task(task_id)

    except StoreError as e:
        logger.error(f"Error deleting task {task_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete task"
        )

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
