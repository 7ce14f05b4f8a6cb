"""Pydantic schemas for users and organization membership."""

from uuid import UUID

from pydantic import BaseModel, Field

from practicedesk.db.enums import Role, UserStatus


class TeamMemberRead(BaseModel):
    """Organization member as listed for the team view."""
    id: UUID
    display_name: str
    email: str
    phone: str | None = None
    role: Role
    status: UserStatus
    reports_to_user_id: UUID | None

    model_config = {"from_attributes": True}


class TeamResponse(BaseModel):
    """The caller's organization."""
    root_owner_id: UUID
    members: list[TeamMemberRead]


class TeamMemberCreate(BaseModel):
    """
    Request to add a member to the caller's organization.

    ``reports_to_user_id`` defaults to the Owner creating the member.
    """
    email: str = Field(..., min_length=3, max_length=255)
    display_name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)
    role: Role = Role.STAFF
    reports_to_user_id: UUID | None = None


class TeamMemberUpdate(BaseModel):
    """Request to update a member (partial)."""
    display_name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)
    role: Role | None = None
    reports_to_user_id: UUID | None = None
    status: UserStatus | None = None
