"""Access scope - which firms (and derived tasks/approvals/clients) a user may see.

Every consumer resolves scope through ``resolve_access_scope``. The role
policy result is always intersected with the firms created inside the
caller's organization here, so a stale or cross-tenant UserFirmMapping can
never widen access beyond the organization boundary.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import false, or_, select
from sqlalchemy.orm import Session

from practicedesk.core.errors import (
    ForbiddenError,
    NotFoundError,
    OrganizationUnresolvableError,
)
from practicedesk.core.structured_logging import build_log_context
from practicedesk.db.enums import Role
from practicedesk.db.models import Firm, Task, User, UserFirmMapping
from practicedesk.services import hierarchy_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessScope:
    """Resolved, request-scoped view of what a user may operate on."""

    user_id: UUID
    role: Role
    root_owner_id: UUID
    member_ids: frozenset[UUID]
    org_firm_ids: frozenset[UUID]
    firm_ids: frozenset[UUID]

    def is_member(self, user_id: UUID | None) -> bool:
        """True if ``user_id`` belongs to this organization."""
        return user_id is not None and user_id in self.member_ids

    def owns_firm(self, firm_id: UUID) -> bool:
        """True if the firm was created inside this organization."""
        return firm_id in self.org_firm_ids

    def can_view_task(self, task: Task) -> bool:
        """Firm in scope, or the task is assigned directly to this user."""
        if task.assigned_to_user_id == self.user_id:
            return True
        return task.firm_id in self.firm_ids

    def task_visibility_clause(self):
        """SQL filter equivalent of ``can_view_task``."""
        clauses = [Task.assigned_to_user_id == self.user_id]
        if self.firm_ids:
            clauses.append(Task.firm_id.in_(list(self.firm_ids)))
        return or_(*clauses)

    def firm_filter_clause(self):
        """SQL filter restricting Firm rows to this scope."""
        if not self.firm_ids:
            return false()
        return Firm.id.in_(list(self.firm_ids))


def resolve_access_scope(db: Session, user_id: UUID, role: Role | str) -> AccessScope:
    """
    Compute the access scope for a user.

    Raises:
        OrganizationUnresolvableError: no root Owner could be determined
    """
    role = Role(role.value if hasattr(role, "value") else role)

    result = hierarchy_service.find_root_owner(db, user_id)
    if not result.found:
        raise OrganizationUnresolvableError(
            f"Unable to determine organization ({result.outcome.value})"
        )

    member_ids = hierarchy_service.organization_members(db, result.owner_id)
    org_firm_ids = _firms_created_by(db, member_ids)
    role_firm_ids = _role_policy_firm_ids(db, user_id, role, org_firm_ids)

    scope = AccessScope(
        user_id=user_id,
        role=role,
        root_owner_id=result.owner_id,
        member_ids=frozenset(member_ids),
        org_firm_ids=frozenset(org_firm_ids),
        firm_ids=frozenset(role_firm_ids & org_firm_ids),
    )
    logger.debug(
        f"Resolved access scope: {len(scope.firm_ids)} firms, {len(scope.member_ids)} members",
        extra=build_log_context(user_id=user_id, org_id=scope.root_owner_id),
    )
    return scope


def _role_policy_firm_ids(
    db: Session,
    user_id: UUID,
    role: Role,
    org_firm_ids: set[UUID],
) -> set[UUID]:
    """
    Role-indexed policy (before the organization intersection).

    - Owner: every firm created by an organization member
    - Manager: firms mapped to the manager or to a direct report (one level)
    - Staff / Individual: firms mapped directly to the user
    """
    if role == Role.OWNER:
        return set(org_firm_ids)

    if role == Role.MANAGER:
        mapped_user_ids = {user_id} | hierarchy_service.direct_reports(db, user_id)
    else:
        mapped_user_ids = {user_id}

    return set(
        db.execute(
            select(UserFirmMapping.firm_id).where(
                UserFirmMapping.user_id.in_(list(mapped_user_ids))
            )
        ).scalars().all()
    )


def _firms_created_by(db: Session, member_ids: set[UUID]) -> set[UUID]:
    return set(
        db.execute(
            select(Firm.id).where(Firm.created_by_user_id.in_(list(member_ids)))
        ).scalars().all()
    )


# =============================================================================
# Guards used by services
# =============================================================================

def require_org_firm(db: Session, scope: AccessScope, firm_id: UUID) -> Firm:
    """Load a firm that must belong to the caller's organization."""
    firm = db.get(Firm, firm_id)
    if not firm:
        raise NotFoundError("Firm not found")
    if not scope.owns_firm(firm.id):
        raise ForbiddenError("Access denied: Firm does not belong to your organization")
    return firm


def require_org_member(db: Session, scope: AccessScope, user_id: UUID) -> User:
    """Load a user that must belong to the caller's organization."""
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if not scope.is_member(user.id):
        raise ForbiddenError("Access denied: User does not belong to your organization")
    return user
