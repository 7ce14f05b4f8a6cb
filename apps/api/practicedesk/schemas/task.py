"""Pydantic schemas for tasks."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from practicedesk.db.enums import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    """Request to create a task."""
    firm_id: UUID
    assigned_to_user_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime


class TaskUpdate(BaseModel):
    """Request to update task fields (partial). Status has its own endpoint."""
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    assigned_to_user_id: UUID | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None


class TaskStatusChange(BaseModel):
    """Request to move a task to a new status."""
    status: TaskStatus


class TaskRead(BaseModel):
    """Full task response."""
    id: UUID
    firm_id: UUID
    title: str
    description: str | None
    assigned_to_user_id: UUID
    created_by_user_id: UUID
    priority: TaskPriority
    status: TaskStatus
    due_date: datetime
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskListResponse(BaseModel):
    """Paginated task list."""
    items: list[TaskRead]
    total: int
    page: int
    per_page: int
    pages: int
