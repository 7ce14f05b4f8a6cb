"""Pydantic schemas for API request/response models."""

from practicedesk.schemas.approval import ApprovalDecision, ApprovalRead, ApprovalRejection
from practicedesk.schemas.auth import TokenPayload, UserSession
from practicedesk.schemas.firm import (
    AccessibleFirmsResponse,
    ClientCreate,
    ClientRead,
    ClientUpdate,
    FirmAssign,
    FirmCreate,
    FirmRead,
    FirmUpdate,
    UserFirmMappingRead,
)
from practicedesk.schemas.task import (
    TaskCreate,
    TaskListResponse,
    TaskRead,
    TaskStatusChange,
    TaskUpdate,
)
from practicedesk.schemas.user import (
    TeamMemberCreate,
    TeamMemberRead,
    TeamMemberUpdate,
    TeamResponse,
)

__all__ = [
    "AccessibleFirmsResponse",
    "ApprovalDecision",
    "ApprovalRead",
    "ApprovalRejection",
    "ClientCreate",
    "ClientRead",
    "ClientUpdate",
    "FirmAssign",
    "FirmCreate",
    "FirmRead",
    "FirmUpdate",
    "TaskCreate",
    "TaskListResponse",
    "TaskRead",
    "TaskStatusChange",
    "TaskUpdate",
    "TeamMemberCreate",
    "TeamMemberRead",
    "TeamMemberUpdate",
    "TeamResponse",
    "TokenPayload",
    "UserFirmMappingRead",
    "UserSession",
]
