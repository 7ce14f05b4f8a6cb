"""Task service - scoped CRUD for tasks.

Status changes are not made here; they go through task_workflow_service so
the approval record moves together with the status.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from practicedesk.core.errors import ForbiddenError, NotFoundError
from practicedesk.core.structured_logging import build_log_context
from practicedesk.db.enums import ROLES_CAN_DELETE_TASKS, TaskPriority, TaskStatus
from practicedesk.db.models import Task
from practicedesk.schemas.task import TaskCreate, TaskUpdate
from practicedesk.services import access_scope_service, task_workflow_service
from practicedesk.services.access_scope_service import AccessScope
from practicedesk.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)


def _load_task(db: Session, scope: AccessScope, task_id: UUID) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise NotFoundError("Task not found")
    if not scope.can_view_task(task):
        raise ForbiddenError("Access denied: Task is outside your access scope")
    return task


def get_task(
    db: Session,
    scope: AccessScope,
    task_id: UUID,
    now: datetime | None = None,
) -> Task:
    """
    Get a task visible to the caller, with its overdue status recomputed.

    Raises:
        NotFoundError: no such task
        ForbiddenError: task is neither in a scoped firm nor assigned to the caller
    """
    task = _load_task(db, scope, task_id)
    return task_workflow_service.refresh_overdue(db, task, now=now)


def list_tasks(
    db: Session,
    scope: AccessScope,
    pagination: PaginationParams,
    status: TaskStatus | None = None,
    firm_id: UUID | None = None,
    assigned_to_user_id: UUID | None = None,
    priority: TaskPriority | None = None,
    now: datetime | None = None,
) -> tuple[list[Task], int]:
    """
    List tasks visible to the caller, newest first.

    Overdue statuses are persisted before filtering so a status filter sees
    the recomputed values.
    """
    visibility = scope.task_visibility_clause()
    task_workflow_service.mark_overdue_tasks(db, visibility, now=now)

    query = db.query(Task).filter(visibility)
    if status:
        query = query.filter(Task.status == status.value)
    if firm_id:
        query = query.filter(Task.firm_id == firm_id)
    if assigned_to_user_id:
        query = query.filter(Task.assigned_to_user_id == assigned_to_user_id)
    if priority:
        query = query.filter(Task.priority == priority.value)

    query = query.order_by(Task.created_at.desc(), Task.id)
    return paginate_query(query, pagination)


def create_task(
    db: Session,
    scope: AccessScope,
    data: TaskCreate,
    now: datetime | None = None,
) -> Task:
    """
    Create a task in a firm of the caller's organization.

    The firm must belong to the organization (not necessarily to the
    caller's own assignments) and the assignee must be an organization member.
    """
    access_scope_service.require_org_firm(db, scope, data.firm_id)
    access_scope_service.require_org_member(db, scope, data.assigned_to_user_id)

    task = Task(
        firm_id=data.firm_id,
        title=data.title,
        description=data.description,
        assigned_to_user_id=data.assigned_to_user_id,
        created_by_user_id=scope.user_id,
        priority=data.priority.value,
        status=TaskStatus.PENDING.value,
        due_date=data.due_date,
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    logger.info(
        "Task created",
        extra=build_log_context(
            user_id=scope.user_id, org_id=scope.root_owner_id, task_id=task.id
        ),
    )
    return task_workflow_service.refresh_overdue(db, task, now=now)


def update_task(
    db: Session,
    scope: AccessScope,
    task_id: UUID,
    data: TaskUpdate,
    now: datetime | None = None,
) -> Task:
    """
    Update task fields (not status).

    Uses exclude_unset=True so only explicitly provided fields change.
    Reassignment is limited to organization members.
    """
    task = _load_task(db, scope, task_id)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("assigned_to_user_id") is not None:
        access_scope_service.require_org_member(db, scope, update_data["assigned_to_user_id"])

    # Only description can be cleared
    clearable_fields = {"description"}

    for field, value in update_data.items():
        if value is None and field not in clearable_fields:
            continue
        if field == "priority":
            value = value.value
        setattr(task, field, value)

    db.commit()
    db.refresh(task)
    return task_workflow_service.refresh_overdue(db, task, now=now)


def update_task_status(
    db: Session,
    scope: AccessScope,
    task_id: UUID,
    new_status: TaskStatus,
    now: datetime | None = None,
) -> Task:
    """Change a task's status through the workflow (role table applies)."""
    task = _load_task(db, scope, task_id)
    return task_workflow_service.change_status(db, scope, task, new_status, now=now)


def request_approval(
    db: Session,
    scope: AccessScope,
    task_id: UUID,
    now: datetime | None = None,
):
    """Submit a task for review; returns the pending approval."""
    task = _load_task(db, scope, task_id)
    return task_workflow_service.request_approval(db, scope, task, now=now)


def approve_task(
    db: Session,
    scope: AccessScope,
    task_id: UUID,
    remarks: str | None = None,
    now: datetime | None = None,
):
    task = _load_task(db, scope, task_id)
    return task_workflow_service.approve_task(db, scope, task, remarks=remarks, now=now)


def reject_task(
    db: Session,
    scope: AccessScope,
    task_id: UUID,
    remarks: str | None,
    now: datetime | None = None,
):
    task = _load_task(db, scope, task_id)
    return task_workflow_service.reject_task(db, scope, task, remarks, now=now)


def delete_task(db: Session, scope: AccessScope, task_id: UUID) -> None:
    """
    Delete a task (and its approval, via cascade).

    Raises:
        ForbiddenError: role may not delete tasks, or task outside scope
    """
    if scope.role not in ROLES_CAN_DELETE_TASKS:
        raise ForbiddenError(f"Role '{scope.role.value}' cannot delete tasks")

    task = _load_task(db, scope, task_id)
    db.delete(task)
    db.commit()

    logger.info(
        "Task deleted",
        extra=build_log_context(
            user_id=scope.user_id, org_id=scope.root_owner_id, task_id=task_id
        ),
    )
