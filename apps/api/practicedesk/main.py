"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from practicedesk.core.config import settings
from practicedesk.core.errors import PracticeDeskError
from practicedesk.db.session import engine

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="PracticeDesk API",
    description="Multi-tenant practice management API for accounting firms",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


async def practicedesk_error_handler(request: Request, exc: PracticeDeskError):
    """Render domain errors as {"detail", "code"} with their HTTP status."""
    log_context = getattr(request.state, "log_context", {})
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message}", extra=log_context)
    elif exc.status_code in (401, 403):
        logger.info(f"{exc.code}: {exc.message}", extra=log_context)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


app.add_exception_handler(PracticeDeskError, practicedesk_error_handler)


# ============================================================================
# Routers
# ============================================================================

from practicedesk.routers import approvals, firms, tasks, users  # noqa: E402

app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
app.include_router(approvals.router, prefix="/approvals", tags=["approvals"])
app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(firms.router, tags=["firms"])  # /firms and /clients


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
