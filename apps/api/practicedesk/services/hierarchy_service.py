"""Reporting-hierarchy resolution.

An organization is not stored: it is the Owner at the root of a reports_to
tree plus everyone whose chain reaches that Owner. Both operations here are
pure reads, recomputed per request, and guarded against cyclic or corrupted
hierarchy data.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from practicedesk.core.config import settings
from practicedesk.core.structured_logging import build_log_context
from practicedesk.db.enums import Role, ROLES_ORGANIZATION_ROOT
from practicedesk.db.models import User

logger = logging.getLogger(__name__)


class RootOwnerOutcome(str, Enum):
    """How a root-owner lookup ended."""

    FOUND = "found"
    USER_NOT_FOUND = "user_not_found"
    ORPHANED = "orphaned"
    CYCLE_DETECTED = "cycle_detected"
    DEPTH_EXCEEDED = "depth_exceeded"


@dataclass(frozen=True)
class RootOwnerResult:
    """Result of walking a user's reporting chain up to its Owner."""

    outcome: RootOwnerOutcome
    owner_id: UUID | None = None

    @property
    def found(self) -> bool:
        return self.outcome == RootOwnerOutcome.FOUND


def find_root_owner(
    db: Session,
    user_id: UUID,
    max_depth: int | None = None,
) -> RootOwnerResult:
    """
    Find the Owner at the root of a user's organization.

    - Owner: the user itself
    - Individual: the user itself (single-person organization)
    - Anyone else: the first Owner found walking reports_to upward

    Each ancestor is visited at most once. A chain that runs out (no
    reports_to, or a dangling reference) is ORPHANED; revisiting an id is
    CYCLE_DETECTED; more than ``max_depth`` hops is DEPTH_EXCEEDED.
    """
    depth_limit = settings.HIERARCHY_MAX_DEPTH if max_depth is None else max_depth

    user = _get_node(db, user_id)
    if user is None:
        return _unresolved(RootOwnerOutcome.USER_NOT_FOUND, user_id)

    if user.role in {r.value for r in ROLES_ORGANIZATION_ROOT}:
        return RootOwnerResult(RootOwnerOutcome.FOUND, user.id)

    visited: set[UUID] = {user.id}
    current_id = user.reports_to_user_id
    depth = 0

    while current_id is not None:
        if current_id in visited:
            return _unresolved(RootOwnerOutcome.CYCLE_DETECTED, user_id)
        if depth >= depth_limit:
            return _unresolved(RootOwnerOutcome.DEPTH_EXCEEDED, user_id)
        visited.add(current_id)
        depth += 1

        ancestor = _get_node(db, current_id)
        if ancestor is None:
            break
        if ancestor.role == Role.OWNER.value:
            return RootOwnerResult(RootOwnerOutcome.FOUND, ancestor.id)
        current_id = ancestor.reports_to_user_id

    return _unresolved(RootOwnerOutcome.ORPHANED, user_id)


def organization_members(db: Session, owner_id: UUID) -> set[UUID]:
    """
    Collect the organization rooted at ``owner_id``.

    Breadth-first over reports_to edges pointing into the collected set.
    Always contains the root itself; ids already collected are never
    expanded again, so self-references and cycles terminate.
    """
    members: set[UUID] = {owner_id}
    frontier: set[UUID] = {owner_id}

    while frontier:
        rows = db.execute(
            select(User.id).where(User.reports_to_user_id.in_(list(frontier)))
        ).scalars().all()
        frontier = {member_id for member_id in rows if member_id not in members}
        members |= frontier

    return members


def direct_reports(db: Session, manager_id: UUID) -> set[UUID]:
    """Users whose reports_to points directly at ``manager_id`` (one level)."""
    return set(
        db.execute(
            select(User.id).where(User.reports_to_user_id == manager_id)
        ).scalars().all()
    )


def _get_node(db: Session, user_id: UUID):
    return db.execute(
        select(User.id, User.role, User.reports_to_user_id).where(User.id == user_id)
    ).first()


def _unresolved(outcome: RootOwnerOutcome, user_id: UUID) -> RootOwnerResult:
    logger.warning(
        "Unable to resolve root owner: %s",
        outcome.value,
        extra=build_log_context(user_id=user_id),
    )
    return RootOwnerResult(outcome)


def reports_up_to(
    db: Session,
    user_id: UUID,
    ancestor_id: UUID,
    max_depth: int | None = None,
) -> bool:
    """
    True if ``ancestor_id`` is ``user_id`` or appears on its reports_to chain.

    Used to refuse reporting-line changes that would close a cycle. A chain
    that is already cyclic or deeper than ``max_depth`` counts as reaching
    the ancestor, so such a change is refused too.
    """
    depth_limit = settings.HIERARCHY_MAX_DEPTH if max_depth is None else max_depth
    visited: set[UUID] = set()
    current_id: UUID | None = user_id

    while current_id is not None:
        if current_id == ancestor_id:
            return True
        if current_id in visited or len(visited) > depth_limit:
            return True
        visited.add(current_id)
        node = _get_node(db, current_id)
        current_id = node.reports_to_user_id if node else None

    return False
