"""Firm service - clients, firms and firm assignment within the caller's organization."""

import logging
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from practicedesk.core.errors import ConflictError, ForbiddenError, NotFoundError
from practicedesk.core.structured_logging import build_log_context
from practicedesk.db.enums import ROLES_CAN_ASSIGN, ROLES_CAN_MANAGE_CLIENTS, Role
from practicedesk.db.models import Client, Firm, UserFirmMapping
from practicedesk.schemas.firm import ClientCreate, ClientUpdate, FirmCreate, FirmUpdate
from practicedesk.services import access_scope_service
from practicedesk.services.access_scope_service import AccessScope

logger = logging.getLogger(__name__)


def _require_client_manager(scope: AccessScope) -> None:
    if scope.role not in ROLES_CAN_MANAGE_CLIENTS:
        raise ForbiddenError(f"Role '{scope.role.value}' cannot manage clients and firms")


# =============================================================================
# Clients
# =============================================================================

def list_clients(db: Session, scope: AccessScope) -> list[Client]:
    """Clients owning a firm in the caller's scope, plus clients the caller created."""
    clients_in_scope = (
        select(Firm.client_id).where(scope.firm_filter_clause()).scalar_subquery()
    )
    return (
        db.query(Client)
        .filter(
            or_(
                Client.id.in_(clients_in_scope),
                Client.created_by_user_id == scope.user_id,
            )
        )
        .order_by(Client.name)
        .all()
    )


def get_client(db: Session, scope: AccessScope, client_id: UUID) -> Client:
    """Load a client created inside the caller's organization."""
    client = db.get(Client, client_id)
    if not client:
        raise NotFoundError("Client not found")
    if not scope.is_member(client.created_by_user_id):
        raise ForbiddenError("Access denied: Client does not belong to your organization")
    return client


def create_client(db: Session, scope: AccessScope, data: ClientCreate) -> Client:
    _require_client_manager(scope)
    client = Client(
        name=data.name,
        email=data.email,
        phone=data.phone,
        created_by_user_id=scope.user_id,
    )
    db.add(client)
    db.commit()
    db.refresh(client)

    logger.info(
        f"Client {client.id} created",
        extra=build_log_context(user_id=scope.user_id, org_id=scope.root_owner_id),
    )
    return client


def update_client(
    db: Session,
    scope: AccessScope,
    client_id: UUID,
    data: ClientUpdate,
) -> Client:
    """Update client fields; email and phone can be cleared."""
    _require_client_manager(scope)
    client = get_client(db, scope, client_id)
    update_data = data.model_dump(exclude_unset=True)

    clearable_fields = {"email", "phone"}
    for field, value in update_data.items():
        if value is None and field not in clearable_fields:
            continue
        setattr(client, field, value)

    db.commit()
    db.refresh(client)
    return client


# =============================================================================
# Firms
# =============================================================================

def list_firms(db: Session, scope: AccessScope) -> list[Firm]:
    """Firms in the caller's scope, with their client loaded, by name."""
    return (
        db.query(Firm)
        .options(joinedload(Firm.client))
        .filter(scope.firm_filter_clause())
        .order_by(Firm.name)
        .all()
    )


def get_firm(db: Session, scope: AccessScope, firm_id: UUID) -> Firm:
    """Load a firm within the caller's access scope."""
    firm = db.get(Firm, firm_id)
    if not firm:
        raise NotFoundError("Firm not found")
    if firm.id not in scope.firm_ids:
        raise ForbiddenError("Access denied: Firm is outside your access scope")
    return firm


def create_firm(db: Session, scope: AccessScope, data: FirmCreate) -> Firm:
    """
    Create a firm under a client of the caller's organization.

    Owners already see every organization firm. Anyone else is assigned to
    the firm they create so it lands in their own scope.

    Raises:
        ForbiddenError: caller cannot manage firms, or client outside the organization
        NotFoundError: client does not exist
    """
    _require_client_manager(scope)
    get_client(db, scope, data.client_id)

    firm = Firm(**data.model_dump(), created_by_user_id=scope.user_id)
    db.add(firm)
    db.flush()
    if scope.role != Role.OWNER:
        db.add(
            UserFirmMapping(
                user_id=scope.user_id,
                firm_id=firm.id,
                assigned_by_user_id=scope.user_id,
            )
        )
    db.commit()
    db.refresh(firm)

    logger.info(
        f"Firm {firm.id} created",
        extra=build_log_context(user_id=scope.user_id, org_id=scope.root_owner_id),
    )
    return firm


def update_firm(
    db: Session,
    scope: AccessScope,
    firm_id: UUID,
    data: FirmUpdate,
) -> Firm:
    """Update firm fields; entity type, PAN and GSTIN can be cleared."""
    _require_client_manager(scope)
    firm = get_firm(db, scope, firm_id)
    update_data = data.model_dump(exclude_unset=True)

    clearable_fields = {"entity_type", "pan", "gstin"}
    for field, value in update_data.items():
        if value is None and field not in clearable_fields:
            continue
        setattr(firm, field, value)

    db.commit()
    db.refresh(firm)
    return firm


# =============================================================================
# Firm assignments
# =============================================================================

def get_mapping(db: Session, user_id: UUID, firm_id: UUID) -> UserFirmMapping | None:
    return (
        db.query(UserFirmMapping)
        .filter(UserFirmMapping.user_id == user_id, UserFirmMapping.firm_id == firm_id)
        .first()
    )


def _require_assigner(scope: AccessScope) -> None:
    if scope.role not in ROLES_CAN_ASSIGN:
        raise ForbiddenError(f"Role '{scope.role.value}' cannot manage firm assignments")


def assign_firm(
    db: Session,
    scope: AccessScope,
    user_id: UUID,
    firm_id: UUID,
) -> UserFirmMapping:
    """
    Assign a firm to a user of the caller's organization.

    Raises:
        ForbiddenError: caller cannot assign, or user/firm outside the organization
        NotFoundError: user or firm does not exist
        ConflictError: the user already has this firm
    """
    _require_assigner(scope)
    access_scope_service.require_org_member(db, scope, user_id)
    access_scope_service.require_org_firm(db, scope, firm_id)

    if get_mapping(db, user_id, firm_id):
        raise ConflictError("Firm already assigned to this user")

    mapping = UserFirmMapping(
        user_id=user_id,
        firm_id=firm_id,
        assigned_by_user_id=scope.user_id,
    )
    db.add(mapping)
    try:
        db.commit()
    except IntegrityError as exc:
        # Concurrent assignment won the unique constraint
        db.rollback()
        raise ConflictError("Firm already assigned to this user") from exc
    db.refresh(mapping)

    logger.info(
        f"Firm {firm_id} assigned to user {user_id}",
        extra=build_log_context(user_id=scope.user_id, org_id=scope.root_owner_id),
    )
    return mapping


def unassign_firm(
    db: Session,
    scope: AccessScope,
    user_id: UUID,
    firm_id: UUID,
) -> None:
    """Remove a firm assignment. Existing tasks are left as they are."""
    _require_assigner(scope)
    access_scope_service.require_org_member(db, scope, user_id)
    access_scope_service.require_org_firm(db, scope, firm_id)

    mapping = get_mapping(db, user_id, firm_id)
    if not mapping:
        raise NotFoundError("Firm assignment not found")

    db.delete(mapping)
    db.commit()

    logger.info(
        f"Firm {firm_id} unassigned from user {user_id}",
        extra=build_log_context(user_id=scope.user_id, org_id=scope.root_owner_id),
    )
