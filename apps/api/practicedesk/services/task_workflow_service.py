"""Task/approval workflow - every task status write goes through here.

Each public operation is one transaction: the status write, the coupled
approval create/reset/delete/decision and the overdue recomputation are
committed together or rolled back together.

Approval policy:
- entering AWAITING_APPROVAL opens (or resets) the approval
- leaving the review states (AWAITING_APPROVAL, OVERDUE) while an approval is
  still PENDING resolves it: approved by the actor when the target is
  COMPLETED (manager/owner override), retracted otherwise
- an overdue flip keeps a pending approval open for the reviewer
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import and_, select, update
from sqlalchemy.orm import Session

from practicedesk.core import task_rules
from practicedesk.core.errors import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationFailedError,
)
from practicedesk.core.structured_logging import build_log_context
from practicedesk.db.enums import ApprovalStatus, ROLES_CAN_APPROVE, TaskStatus
from practicedesk.db.models import Approval, Task
from practicedesk.services import approval_service
from practicedesk.services.access_scope_service import AccessScope

logger = logging.getLogger(__name__)


@contextmanager
def _unit_of_work(db: Session) -> Iterator[None]:
    """Commit on success, roll back and re-raise on any error."""
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def _lock_task(db: Session, task: Task) -> Task:
    """Re-read the task row FOR UPDATE so concurrent status writes serialize."""
    return (
        db.query(Task)
        .filter(Task.id == task.id)
        .with_for_update()
        .populate_existing()
        .one()
    )


# =============================================================================
# Overdue detection (lazy, on read and on write)
# =============================================================================

def is_overdue(task: Task, now: datetime | None = None) -> bool:
    """Past due and not in a status the overdue check leaves alone."""
    if task.status in task_rules.OVERDUE_EXEMPT_STATUSES:
        return False
    return task.due_date is not None and task.due_date < _now(now)


def _apply_overdue(task: Task, now: datetime) -> bool:
    if task.status == TaskStatus.OVERDUE.value or not is_overdue(task, now):
        return False
    task.status = TaskStatus.OVERDUE.value
    return True


def refresh_overdue(db: Session, task: Task, now: datetime | None = None) -> Task:
    """Persist OVERDUE for a single task if its due date has passed."""
    with _unit_of_work(db):
        if _apply_overdue(task, _now(now)):
            logger.info("Task marked overdue", extra=build_log_context(task_id=task.id))
    return task


def mark_overdue_tasks(db: Session, criteria, now: datetime | None = None) -> int:
    """
    Bulk-persist OVERDUE for every past-due task matching ``criteria``.

    Used before listing so filters and results see recomputed statuses.
    Returns the number of tasks flipped.
    """
    past_due = and_(
        criteria,
        Task.due_date < _now(now),
        Task.status.not_in(
            sorted(task_rules.OVERDUE_EXEMPT_STATUSES | {TaskStatus.OVERDUE.value})
        ),
    )
    with _unit_of_work(db):
        task_ids = db.execute(
            select(Task.id).where(past_due).with_for_update()
        ).scalars().all()
        if task_ids:
            # Session state is refreshed by the commit's expire_all
            db.execute(
                update(Task)
                .where(Task.id.in_(task_ids))
                .values(status=TaskStatus.OVERDUE.value)
                .execution_options(synchronize_session=False)
            )
    if task_ids:
        logger.info(f"Marked {len(task_ids)} tasks overdue")
    return len(task_ids)


# =============================================================================
# Status transitions
# =============================================================================

def change_status(
    db: Session,
    scope: AccessScope,
    task: Task,
    new_status: TaskStatus,
    now: datetime | None = None,
) -> Task:
    """
    Move a task to ``new_status`` on behalf of the scope's user.

    Callers must already have checked the user may write to this task.

    Raises:
        InvalidTransitionError: the role's transition table forbids the move
    """
    now = _now(now)
    target = TaskStatus(new_status).value

    with _unit_of_work(db):
        task = _lock_task(db, task)
        # The role table applies to the recomputed status
        _apply_overdue(task, now)
        current = task.status

        if current != target:
            if not task_rules.is_transition_allowed(scope.role, current, target):
                logger.warning(
                    f"Rejected status transition {current} -> {target} for role {scope.role.value}",
                    extra=build_log_context(
                        user_id=scope.user_id, org_id=scope.root_owner_id, task_id=task.id
                    ),
                )
                raise InvalidTransitionError(
                    f"Role '{scope.role.value}' cannot move a task from '{current}' to '{target}'",
                    from_status=current,
                    to_status=target,
                )
            _apply_transition(db, task, current, target, scope.user_id, now)
            logger.info(
                f"Task status {current} -> {target}",
                extra=build_log_context(
                    user_id=scope.user_id, org_id=scope.root_owner_id, task_id=task.id
                ),
            )

        _apply_overdue(task, now)

    db.refresh(task)
    return task


def _apply_transition(
    db: Session,
    task: Task,
    current: str,
    target: str,
    actor_user_id,
    now: datetime,
) -> None:
    """Write the status plus its coupled side effects (no commit)."""
    approval = task.approval
    pending = approval is not None and approval.status == ApprovalStatus.PENDING.value

    if (
        pending
        and current in task_rules.REVIEW_STATUSES
        and target not in task_rules.REVIEW_STATUSES
    ):
        if target == TaskStatus.COMPLETED.value:
            approval_service.mark_approved(db, approval, actor_user_id, now=now)
        else:
            approval_service.retract(db, task)

    if target == TaskStatus.AWAITING_APPROVAL.value:
        approval_service.open_or_reopen(db, task, actor_user_id)

    task.status = target
    if target == TaskStatus.COMPLETED.value:
        task.completed_at = now
    elif current == TaskStatus.COMPLETED.value:
        task.completed_at = None
    db.flush()


def request_approval(
    db: Session,
    scope: AccessScope,
    task: Task,
    now: datetime | None = None,
) -> Approval:
    """Submit a task for review (status -> AWAITING_APPROVAL)."""
    task = change_status(db, scope, task, TaskStatus.AWAITING_APPROVAL, now=now)
    if task.approval is None:
        raise NotFoundError("Approval not found")
    return task.approval


# =============================================================================
# Decisions (Owner/Manager only)
# =============================================================================

def _require_decider(scope: AccessScope, task: Task) -> None:
    if scope.role not in ROLES_CAN_APPROVE:
        raise ForbiddenError(f"Role '{scope.role.value}' cannot decide approvals")
    if not scope.can_view_task(task):
        raise ForbiddenError("Access denied: Task is outside your access scope")


def _require_pending_approval(task: Task) -> Approval:
    approval = task.approval
    if approval is None:
        raise NotFoundError("Approval not found")
    if approval.status != ApprovalStatus.PENDING.value:
        raise InvalidTransitionError(
            f"Approval is not pending (status: {approval.status})"
        )
    return approval


def approve_task(
    db: Session,
    scope: AccessScope,
    task: Task,
    remarks: str | None = None,
    now: datetime | None = None,
) -> Approval:
    """Approve the pending approval and complete the task."""
    now = _now(now)
    _require_decider(scope, task)

    with _unit_of_work(db):
        task = _lock_task(db, task)
        approval = _require_pending_approval(task)
        approval_service.mark_approved(db, approval, scope.user_id, remarks=remarks, now=now)
        task.status = TaskStatus.COMPLETED.value
        task.completed_at = now
        db.flush()

    logger.info(
        "Task approved",
        extra=build_log_context(
            user_id=scope.user_id, org_id=scope.root_owner_id, task_id=task.id
        ),
    )
    db.refresh(approval)
    return approval


def reject_task(
    db: Session,
    scope: AccessScope,
    task: Task,
    remarks: str | None,
    now: datetime | None = None,
) -> Approval:
    """
    Reject the pending approval and send the task back to IN_PROGRESS.

    Raises:
        ValidationFailedError: remarks missing or blank
    """
    now = _now(now)
    _require_decider(scope, task)
    if not remarks or not remarks.strip():
        raise ValidationFailedError("Remarks are required for rejection")

    with _unit_of_work(db):
        task = _lock_task(db, task)
        approval = _require_pending_approval(task)
        approval_service.mark_rejected(db, approval, scope.user_id, remarks.strip(), now=now)
        task.status = TaskStatus.IN_PROGRESS.value
        task.completed_at = None
        db.flush()

    logger.info(
        "Task rejected",
        extra=build_log_context(
            user_id=scope.user_id, org_id=scope.root_owner_id, task_id=task.id
        ),
    )
    db.refresh(approval)
    return approval

