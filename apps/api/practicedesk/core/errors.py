"""Domain error taxonomy shared by services and routers.

Each error carries a stable machine-readable ``code`` and the HTTP status the
API layer renders it with. These are business-rule failures; none of them are
retried. Infrastructure failures (database unavailable, etc.) are left as
their own exception types and surface as generic 500s.
"""


class PracticeDeskError(Exception):
    """Base exception for business-rule errors."""

    code = "error"
    status_code = 400

    def __init__(self, message: str | None = None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class UnauthenticatedError(PracticeDeskError):
    """No valid identity."""

    code = "unauthenticated"
    status_code = 401


class OrganizationUnresolvableError(PracticeDeskError):
    """Unable to determine organization."""

    code = "organization_unresolvable"
    status_code = 403


class ForbiddenError(PracticeDeskError):
    """Access denied."""

    code = "forbidden"
    status_code = 403


class InvalidTransitionError(ForbiddenError):
    """Status transition not allowed for this role."""

    code = "invalid_transition"

    def __init__(
        self,
        message: str | None = None,
        *,
        from_status: str | None = None,
        to_status: str | None = None,
    ):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(message)


class NotFoundError(PracticeDeskError):
    """Resource not found."""

    code = "not_found"
    status_code = 404


class ValidationFailedError(PracticeDeskError):
    """Request failed validation."""

    code = "validation_failed"
    status_code = 422


class ConflictError(PracticeDeskError):
    """Resource already exists."""

    code = "conflict"
    status_code = 409
