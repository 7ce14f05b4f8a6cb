"""Tasks router - task CRUD, status changes and approval decisions."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from practicedesk.core.deps import get_access_scope, get_db, require_csrf_header, require_roles
from practicedesk.db.enums import ROLES_CAN_APPROVE, ROLES_CAN_DELETE_TASKS, TaskPriority, TaskStatus
from practicedesk.schemas.approval import ApprovalDecision, ApprovalRead, ApprovalRejection
from practicedesk.schemas.task import (
    TaskCreate,
    TaskListResponse,
    TaskRead,
    TaskStatusChange,
    TaskUpdate,
)
from practicedesk.services import task_service
from practicedesk.services.access_scope_service import AccessScope
from practicedesk.utils.pagination import PaginationParams, get_pagination

router = APIRouter()


@router.get("", response_model=TaskListResponse)
def list_tasks(
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
    pagination: PaginationParams = Depends(get_pagination),
    status: TaskStatus | None = Query(None),
    firm_id: UUID | None = None,
    assigned_to_user_id: UUID | None = None,
    priority: TaskPriority | None = Query(None),
):
    """
    List tasks visible to the caller.

    A task is visible if its firm is in the caller's scope or it is assigned
    to the caller. Overdue statuses are recomputed before filtering.
    """
    items, total = task_service.list_tasks(
        db,
        scope,
        pagination,
        status=status,
        firm_id=firm_id,
        assigned_to_user_id=assigned_to_user_id,
        priority=priority,
    )
    return TaskListResponse(
        items=[TaskRead.model_validate(t) for t in items],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pagination.page_count(total),
    )


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Get a task by ID."""
    return task_service.get_task(db, scope, task_id)


@router.post(
    "",
    response_model=TaskRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_task(
    data: TaskCreate,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Create a task; firm and assignee must belong to the caller's organization."""
    return task_service.create_task(db, scope, data)


@router.patch("/{task_id}", response_model=TaskRead, dependencies=[Depends(require_csrf_header)])
def update_task(
    task_id: UUID,
    data: TaskUpdate,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return task_service.update_task(db, scope, task_id, data)


@router.patch(
    "/{task_id}/status",
    response_model=TaskRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_task_status(
    task_id: UUID,
    data: TaskStatusChange,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Move a task to a new status.

    Staff and Manager are limited by their transition tables; Owner and
    Individual may set any status.
    """
    return task_service.update_task_status(db, scope, task_id, data.status)


@router.delete(
    "/{task_id}",
    status_code=204,
    dependencies=[
        Depends(require_csrf_header),
        Depends(require_roles(ROLES_CAN_DELETE_TASKS)),
    ],
)
def delete_task(
    task_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    task_service.delete_task(db, scope, task_id)


# =============================================================================
# Approval workflow
# =============================================================================

@router.post(
    "/{task_id}/approval",
    response_model=ApprovalRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def request_approval(
    task_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Submit a task for review (status becomes awaiting_approval)."""
    return task_service.request_approval(db, scope, task_id)


@router.post(
    "/{task_id}/approval/approve",
    response_model=ApprovalRead,
    dependencies=[
        Depends(require_csrf_header),
        Depends(require_roles(ROLES_CAN_APPROVE)),
    ],
)
def approve_task(
    task_id: UUID,
    data: ApprovalDecision | None = None,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Approve the pending approval; the task becomes completed."""
    remarks = data.remarks if data else None
    return task_service.approve_task(db, scope, task_id, remarks=remarks)


@router.post(
    "/{task_id}/approval/reject",
    response_model=ApprovalRead,
    dependencies=[
        Depends(require_csrf_header),
        Depends(require_roles(ROLES_CAN_APPROVE)),
    ],
)
def reject_task(
    task_id: UUID,
    data: ApprovalRejection,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Reject the pending approval (remarks required); the task goes back to in_progress."""
    return task_service.reject_task(db, scope, task_id, data.remarks)
