"""Error types shared by the store, service and API layers."""

from typing import Optional


class ValidationError(ValueError):
    """Raised when a task request violates a task invariant."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class StoreError(Exception):
    """Raised when the underlying database operation fails."""


class ConstraintViolation(StoreError):
    """Raised when a write violates a table constraint (e.g. duplicate id)."""
