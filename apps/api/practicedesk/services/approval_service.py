"""Approval lifecycle - the 1:1 satellite record of a task awaiting review.

The mutating helpers here only stage changes on the session (flush, no
commit). They are driven by task_workflow_service, which owns the
transaction so the task status and its approval always change together.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from practicedesk.core.errors import ForbiddenError, NotFoundError
from practicedesk.core.structured_logging import build_log_context
from practicedesk.db.enums import ApprovalStatus
from practicedesk.db.models import Approval, Task
from practicedesk.services.access_scope_service import AccessScope

logger = logging.getLogger(__name__)


def open_or_reopen(db: Session, task: Task, actor_user_id: UUID) -> Approval:
    """
    Open a PENDING approval for the task, or reset the existing one in place.

    Reset clears the previous decision (approver, timestamps, remarks) so the
    same row carries the new review cycle.
    """
    approval = task.approval
    if approval is None:
        approval = Approval(
            task_id=task.id,
            status=ApprovalStatus.PENDING.value,
            requested_by_user_id=actor_user_id,
        )
        task.approval = approval
        action = "opened"
    else:
        approval.status = ApprovalStatus.PENDING.value
        approval.requested_by_user_id = actor_user_id
        approval.approved_by_user_id = None
        approval.approved_at = None
        approval.rejected_at = None
        approval.remarks = None
        action = "reopened"

    db.flush()
    logger.info(
        f"Approval {action}",
        extra=build_log_context(user_id=actor_user_id, task_id=task.id),
    )
    return approval


def retract(db: Session, task: Task) -> bool:
    """
    Delete the task's approval if it is still PENDING.

    Decided approvals are history and are never deleted. Returns True if a
    row was removed.
    """
    approval = task.approval
    if approval is None or approval.status != ApprovalStatus.PENDING.value:
        return False

    task.approval = None  # delete-orphan removes the row
    db.flush()
    logger.info("Approval retracted", extra=build_log_context(task_id=task.id))
    return True


def mark_approved(
    db: Session,
    approval: Approval,
    actor_user_id: UUID,
    remarks: str | None = None,
    now: datetime | None = None,
) -> Approval:
    """Record an approve decision on the approval row."""
    approval.status = ApprovalStatus.APPROVED.value
    approval.approved_by_user_id = actor_user_id
    approval.approved_at = now or datetime.now(timezone.utc)
    approval.rejected_at = None
    if remarks is not None:
        approval.remarks = remarks
    db.flush()
    return approval


def mark_rejected(
    db: Session,
    approval: Approval,
    actor_user_id: UUID,
    remarks: str,
    now: datetime | None = None,
) -> Approval:
    """Record a reject decision on the approval row (decider kept in approved_by)."""
    approval.status = ApprovalStatus.REJECTED.value
    approval.approved_by_user_id = actor_user_id
    approval.approved_at = None
    approval.rejected_at = now or datetime.now(timezone.utc)
    approval.remarks = remarks
    db.flush()
    return approval


# =============================================================================
# Scoped reads
# =============================================================================

def list_approvals(
    db: Session,
    scope: AccessScope,
    status: ApprovalStatus | None = None,
) -> list[Approval]:
    """
    List approvals for tasks visible to the caller.

    Uses the same visibility rule as task listing (firm in scope, or the
    task is assigned to the caller).
    """
    query = (
        db.query(Approval)
        .join(Task, Approval.task_id == Task.id)
        .options(joinedload(Approval.task))
        .filter(scope.task_visibility_clause())
    )
    if status:
        query = query.filter(Approval.status == status.value)
    return query.order_by(Approval.created_at.desc()).all()


def get_approval(db: Session, scope: AccessScope, approval_id: UUID) -> Approval:
    """
    Get an approval visible to the caller.

    Raises:
        NotFoundError: no such approval
        ForbiddenError: its task is outside the caller's scope
    """
    approval = db.get(Approval, approval_id)
    if not approval:
        raise NotFoundError("Approval not found")
    if not scope.can_view_task(approval.task):
        raise ForbiddenError("Access denied: Approval is outside your access scope")
    return approval
