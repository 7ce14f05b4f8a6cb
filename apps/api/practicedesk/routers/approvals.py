"""Approvals router - read access to approval records."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from practicedesk.core.deps import get_access_scope, get_db
from practicedesk.db.enums import ApprovalStatus
from practicedesk.schemas.approval import ApprovalRead
from practicedesk.services import approval_service
from practicedesk.services.access_scope_service import AccessScope

router = APIRouter()


@router.get("", response_model=list[ApprovalRead])
def list_approvals(
    status: ApprovalStatus | None = Query(None),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """List approvals for tasks visible to the caller, newest first."""
    return approval_service.list_approvals(db, scope, status=status)


@router.get("/{approval_id}", response_model=ApprovalRead)
def get_approval(
    approval_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return approval_service.get_approval(db, scope, approval_id)
