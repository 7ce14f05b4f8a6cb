"""User service - organization team reads and Owner-managed membership.

Only the Owner changes who belongs to the organization and where they sit in
it. Members are never hard-deleted here; an Owner deactivates them instead,
which also revokes their open sessions.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from practicedesk.core.errors import ConflictError, ForbiddenError, ValidationFailedError
from practicedesk.core.structured_logging import build_log_context
from practicedesk.db.enums import (
    ROLES_CAN_MANAGE_TEAM,
    ROLES_TEAM_MEMBER,
    Role,
    UserStatus,
)
from practicedesk.db.models import User
from practicedesk.schemas.user import TeamMemberCreate, TeamMemberUpdate
from practicedesk.services import access_scope_service, hierarchy_service
from practicedesk.services.access_scope_service import AccessScope

logger = logging.getLogger(__name__)


def list_team(db: Session, scope: AccessScope) -> list[User]:
    """Members of the caller's organization, root first then by name."""
    members = (
        db.query(User)
        .filter(User.id.in_(list(scope.member_ids)))
        .order_by(User.display_name)
        .all()
    )
    return sorted(members, key=lambda user: user.id != scope.root_owner_id)


def get_member(db: Session, scope: AccessScope, user_id: UUID) -> User:
    """Load a member of the caller's organization."""
    return access_scope_service.require_org_member(db, scope, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def _require_team_manager(scope: AccessScope) -> None:
    if scope.role not in ROLES_CAN_MANAGE_TEAM:
        raise ForbiddenError(f"Role '{scope.role.value}' cannot manage the team")


def _require_member_role(role: Role) -> None:
    if role not in ROLES_TEAM_MEMBER:
        allowed = ", ".join(sorted(r.value for r in ROLES_TEAM_MEMBER))
        raise ValidationFailedError(f"Team members must have one of the roles: {allowed}")


def create_member(db: Session, scope: AccessScope, data: TeamMemberCreate) -> User:
    """
    Add a Manager or Staff member to the caller's organization.

    Raises:
        ForbiddenError: caller is not the Owner, or reports_to is outside the organization
        ValidationFailedError: role is not a team-member role
        ConflictError: email already registered
    """
    _require_team_manager(scope)
    _require_member_role(data.role)

    reports_to_id = data.reports_to_user_id or scope.user_id
    access_scope_service.require_org_member(db, scope, reports_to_id)

    email = data.email.strip().lower()
    if get_user_by_email(db, email):
        raise ConflictError("User with this email already exists")

    user = User(
        email=email,
        display_name=data.display_name,
        phone=data.phone,
        role=data.role.value,
        status=UserStatus.ACTIVE.value,
        reports_to_user_id=reports_to_id,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("User with this email already exists") from exc
    db.refresh(user)

    logger.info(
        f"Team member {user.id} added as {user.role}",
        extra=build_log_context(user_id=scope.user_id, org_id=scope.root_owner_id),
    )
    return user


def update_member(
    db: Session,
    scope: AccessScope,
    user_id: UUID,
    data: TeamMemberUpdate,
) -> User:
    """
    Update a member of the caller's organization.

    Uses exclude_unset=True so only explicitly provided fields change. The
    root Owner's role, reporting line and status are fixed. A new reporting
    line must stay inside the organization and must not close a cycle.
    Deactivating a member bumps token_version, revoking their sessions.

    Raises:
        ForbiddenError: caller is not the Owner, or target/reports_to outside the organization
        ValidationFailedError: invalid role, cleared reporting line, or a cycle
    """
    _require_team_manager(scope)
    user = access_scope_service.require_org_member(db, scope, user_id)
    update_data = data.model_dump(exclude_unset=True)

    structural = {"role", "reports_to_user_id", "status"} & update_data.keys()
    if structural and user.id == scope.root_owner_id:
        raise ForbiddenError("The organization Owner's role, reporting line and status cannot be changed")

    if "role" in update_data and update_data["role"] is not None:
        _require_member_role(update_data["role"])

    if "reports_to_user_id" in update_data:
        _check_reporting_line(db, scope, user, update_data["reports_to_user_id"])

    if update_data.get("display_name") is not None:
        user.display_name = update_data["display_name"]
    # Only phone can be cleared
    if "phone" in update_data:
        user.phone = update_data["phone"]
    if update_data.get("role") is not None:
        user.role = update_data["role"].value
    if update_data.get("reports_to_user_id") is not None:
        user.reports_to_user_id = update_data["reports_to_user_id"]
    if update_data.get("status") is not None and update_data["status"].value != user.status:
        user.status = update_data["status"].value
        if user.status == UserStatus.INACTIVE.value:
            user.token_version += 1

    db.commit()
    db.refresh(user)

    logger.info(
        f"Team member {user.id} updated",
        extra=build_log_context(user_id=scope.user_id, org_id=scope.root_owner_id),
    )
    return user


def _check_reporting_line(
    db: Session,
    scope: AccessScope,
    user: User,
    reports_to_id: UUID | None,
) -> None:
    if reports_to_id is None:
        raise ValidationFailedError("Team members must report to someone in the organization")
    access_scope_service.require_org_member(db, scope, reports_to_id)
    if hierarchy_service.reports_up_to(db, reports_to_id, user.id):
        logger.warning(
            f"Rejected reporting line {user.id} -> {reports_to_id}: cycle",
            extra=build_log_context(user_id=scope.user_id, org_id=scope.root_owner_id),
        )
        raise ValidationFailedError("Reporting line would create a cycle")
