"""Users router - organization team, member management and firm assignments."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from practicedesk.core.deps import get_access_scope, get_db, require_csrf_header, require_roles
from practicedesk.db.enums import ROLES_CAN_ASSIGN, ROLES_CAN_MANAGE_TEAM
from practicedesk.schemas.firm import FirmAssign, UserFirmMappingRead
from practicedesk.schemas.user import (
    TeamMemberCreate,
    TeamMemberRead,
    TeamMemberUpdate,
    TeamResponse,
)
from practicedesk.services import firm_service, user_service
from practicedesk.services.access_scope_service import AccessScope

router = APIRouter()


@router.get("/team", response_model=TeamResponse)
def list_team(
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Members of the caller's organization (root Owner first)."""
    members = user_service.list_team(db, scope)
    return TeamResponse(
        root_owner_id=scope.root_owner_id,
        members=[TeamMemberRead.model_validate(m) for m in members],
    )


@router.post(
    "",
    response_model=TeamMemberRead,
    status_code=201,
    dependencies=[
        Depends(require_csrf_header),
        Depends(require_roles(ROLES_CAN_MANAGE_TEAM)),
    ],
)
def create_member(
    data: TeamMemberCreate,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Add a Manager or Staff member. Returns 409 if the email is taken."""
    return user_service.create_member(db, scope, data)


@router.get("/{user_id}", response_model=TeamMemberRead)
def get_member(
    user_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return user_service.get_member(db, scope, user_id)


@router.patch(
    "/{user_id}",
    response_model=TeamMemberRead,
    dependencies=[
        Depends(require_csrf_header),
        Depends(require_roles(ROLES_CAN_MANAGE_TEAM)),
    ],
)
def update_member(
    user_id: UUID,
    data: TeamMemberUpdate,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Change a member's details, role, reporting line or status."""
    return user_service.update_member(db, scope, user_id, data)


@router.post(
    "/{user_id}/firms",
    response_model=UserFirmMappingRead,
    status_code=201,
    dependencies=[
        Depends(require_csrf_header),
        Depends(require_roles(ROLES_CAN_ASSIGN)),
    ],
)
def assign_firm(
    user_id: UUID,
    data: FirmAssign,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Assign a firm to a user. Returns 409 if already assigned."""
    return firm_service.assign_firm(db, scope, user_id, data.firm_id)


@router.delete(
    "/{user_id}/firms/{firm_id}",
    status_code=204,
    dependencies=[
        Depends(require_csrf_header),
        Depends(require_roles(ROLES_CAN_ASSIGN)),
    ],
)
def unassign_firm(
    user_id: UUID,
    firm_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    firm_service.unassign_firm(db, scope, user_id, firm_id)
