"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator

import jwt
from fastapi import Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from practicedesk.core.errors import ForbiddenError, UnauthenticatedError
from practicedesk.core.security import decode_session_token
from practicedesk.core.structured_logging import build_log_context
from practicedesk.db.session import SessionLocal

# Cookie and header names
COOKIE_NAME = "pd_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _session_token(request: Request) -> str | None:
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def get_current_user(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Get authenticated user from the session cookie (or bearer token).

    Validates:
    - Token present
    - JWT is valid and not expired
    - User exists and is active
    - Token version matches (for revocation support)

    Raises:
        UnauthenticatedError: Authentication failed
    """
    from practicedesk.db.models import User
    from practicedesk.schemas.auth import TokenPayload

    token = _session_token(request)
    if not token:
        raise UnauthenticatedError("Not authenticated")

    try:
        payload = TokenPayload.model_validate(decode_session_token(token))
    except (jwt.InvalidTokenError, ValidationError):
        raise UnauthenticatedError("Invalid session")

    user = db.get(User, payload.sub)
    if not user:
        raise UnauthenticatedError("User not found")

    if not user.is_active:
        raise UnauthenticatedError("Account disabled")

    # Token version check (revocation support)
    if user.token_version != payload.token_version:
        raise UnauthenticatedError("Session revoked")

    return user


def get_current_session(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Get session context: user_id, role, email, display name.

    The role comes from the user row, not the token, so a role change
    takes effect on the next request.

    Raises:
        UnauthenticatedError: Not authenticated
        ForbiddenError: Unknown role
    """
    from practicedesk.db.enums import Role
    from practicedesk.schemas.auth import UserSession

    user = get_current_user(request, db)

    # Validate role is a known enum value - return 403 not 500
    if not Role.has_value(user.role):
        raise ForbiddenError(f"Unknown role '{user.role}'. Contact administrator.")

    return UserSession(
        user_id=user.id,
        role=Role(user.role),
        email=user.email,
        display_name=user.display_name,
    )


def get_access_scope(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Resolve the caller's access scope (organization, members, firms).

    This is the PRIMARY dependency for tenant data. Every list/detail query
    MUST go through the returned scope.

    Raises:
        OrganizationUnresolvableError: no root Owner for the caller
    """
    from practicedesk.services import access_scope_service

    session = get_current_session(request, db)
    scope = access_scope_service.resolve_access_scope(db, session.user_id, session.role)
    request.state.log_context = build_log_context(
        user_id=scope.user_id,
        org_id=scope.root_owner_id,
        route=request.url.path,
        method=request.method,
    )
    return scope


def require_roles(allowed_roles):
    """
    Dependency factory for role-based authorization.

    Uses enum values (not strings) to prevent drift.

    Usage:
        @router.post("/x", dependencies=[Depends(require_roles(ROLES_CAN_ASSIGN))])
    """
    def dependency(request: Request, db: Session = Depends(get_db)):
        session = get_current_session(request, db)
        if session.role not in allowed_roles:
            raise ForbiddenError(
                f"Role '{session.role.value}' not authorized for this action"
            )
        return session
    return dependency


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Apply to state-changing endpoints (POST, PATCH, DELETE).

    Raises:
        ForbiddenError: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise ForbiddenError(
            f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'"
        )
