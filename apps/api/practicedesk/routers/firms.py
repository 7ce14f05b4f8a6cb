"""Firms router - clients and firms within the caller's organization."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from practicedesk.core.deps import get_access_scope, get_db, require_csrf_header, require_roles
from practicedesk.db.enums import ROLES_CAN_MANAGE_CLIENTS
from practicedesk.schemas.firm import (
    AccessibleFirmsResponse,
    ClientCreate,
    ClientRead,
    ClientUpdate,
    FirmCreate,
    FirmRead,
    FirmUpdate,
)
from practicedesk.services import firm_service
from practicedesk.services.access_scope_service import AccessScope

router = APIRouter()

_manage_dependencies = [
    Depends(require_csrf_header),
    Depends(require_roles(ROLES_CAN_MANAGE_CLIENTS)),
]


@router.get("/firms/accessible", response_model=AccessibleFirmsResponse)
def accessible_firms(scope: AccessScope = Depends(get_access_scope)):
    """Ids of the firms the caller may operate against."""
    return AccessibleFirmsResponse(firm_ids=sorted(scope.firm_ids, key=str))


@router.get("/firms", response_model=list[FirmRead])
def list_firms(
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return firm_service.list_firms(db, scope)


@router.get("/firms/{firm_id}", response_model=FirmRead)
def get_firm(
    firm_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return firm_service.get_firm(db, scope, firm_id)


@router.post(
    "/firms",
    response_model=FirmRead,
    status_code=201,
    dependencies=_manage_dependencies,
)
def create_firm(
    data: FirmCreate,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Create a firm under one of the organization's clients."""
    return firm_service.create_firm(db, scope, data)


@router.patch(
    "/firms/{firm_id}",
    response_model=FirmRead,
    dependencies=_manage_dependencies,
)
def update_firm(
    firm_id: UUID,
    data: FirmUpdate,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return firm_service.update_firm(db, scope, firm_id, data)


@router.get("/clients", response_model=list[ClientRead])
def list_clients(
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """Clients with a firm in the caller's scope, plus those the caller created."""
    return firm_service.list_clients(db, scope)


@router.get("/clients/{client_id}", response_model=ClientRead)
def get_client(
    client_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return firm_service.get_client(db, scope, client_id)


@router.post(
    "/clients",
    response_model=ClientRead,
    status_code=201,
    dependencies=_manage_dependencies,
)
def create_client(
    data: ClientCreate,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return firm_service.create_client(db, scope, data)


@router.patch(
    "/clients/{client_id}",
    response_model=ClientRead,
    dependencies=_manage_dependencies,
)
def update_client(
    client_id: UUID,
    data: ClientUpdate,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return firm_service.update_client(db, scope, client_id, data)
