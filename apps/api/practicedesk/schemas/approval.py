"""Pydantic schemas for task approvals."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from practicedesk.db.enums import ApprovalStatus


class ApprovalDecision(BaseModel):
    """Approve request body; remarks are optional."""
    remarks: str | None = Field(None, max_length=2000)


class ApprovalRejection(BaseModel):
    """
    Reject request body.

    Remarks are required, but emptiness is checked by the workflow so the
    error surfaces as validation_failed rather than a schema error.
    """
    remarks: str | None = Field(None, max_length=2000)


class ApprovalRead(BaseModel):
    """Approval response."""
    id: UUID
    task_id: UUID
    status: ApprovalStatus
    requested_by_user_id: UUID
    approved_by_user_id: UUID | None
    approved_at: datetime | None
    rejected_at: datetime | None
    remarks: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
