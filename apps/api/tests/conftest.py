"""
Test configuration and fixtures.

Provides:
- Fresh in-memory SQLite schema per test
- An organization fixture (owner, manager, staff, firms, assignments)
  plus a second organization and an Individual practitioner
- JWT token minting and HTTPX AsyncClient factory for API tests
"""
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Generator

# Point the app at an in-memory database before anything imports settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from practicedesk.core.deps import COOKIE_NAME, CSRF_HEADER, CSRF_HEADER_VALUE, get_db
from practicedesk.core.security import create_session_token
from practicedesk.db.base import Base
from practicedesk.db.enums import Role, TaskPriority, TaskStatus
from practicedesk.db.models import Client, Firm, Task, User, UserFirmMapping
from practicedesk.db.session import SessionLocal
from practicedesk.main import app
from practicedesk.services.access_scope_service import resolve_access_scope


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Database session on a private in-memory SQLite database.

    App code commits freely; the whole database is discarded after the test.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = SessionLocal(bind=engine)

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


# =============================================================================
# Builders
# =============================================================================

def make_user(db: Session, role: Role, reports_to: User | None = None, name: str | None = None) -> User:
    label = name or role.value
    user = User(
        id=uuid.uuid4(),
        email=f"{label}-{uuid.uuid4().hex[:8]}@test.com",
        display_name=f"{label.title()} User",
        role=role.value,
        reports_to_user_id=reports_to.id if reports_to else None,
    )
    db.add(user)
    db.commit()
    return user


def make_client(db: Session, creator: User, name: str = "Acme Holdings") -> Client:
    client = Client(id=uuid.uuid4(), name=name, created_by_user_id=creator.id)
    db.add(client)
    db.commit()
    return client


def make_firm(db: Session, creator: User, client: Client, name: str) -> Firm:
    firm = Firm(
        id=uuid.uuid4(),
        client_id=client.id,
        name=name,
        created_by_user_id=creator.id,
    )
    db.add(firm)
    db.commit()
    return firm


def assign(db: Session, user: User, firm: Firm, by: User | None = None) -> UserFirmMapping:
    mapping = UserFirmMapping(
        id=uuid.uuid4(),
        user_id=user.id,
        firm_id=firm.id,
        assigned_by_user_id=by.id if by else None,
    )
    db.add(mapping)
    db.commit()
    return mapping


def make_task(
    db: Session,
    firm: Firm,
    assignee: User,
    creator: User,
    status: TaskStatus = TaskStatus.PENDING,
    due_in: timedelta = timedelta(days=7),
    title: str = "File GST return",
) -> Task:
    task = Task(
        id=uuid.uuid4(),
        firm_id=firm.id,
        title=title,
        assigned_to_user_id=assignee.id,
        created_by_user_id=creator.id,
        priority=TaskPriority.MEDIUM.value,
        status=status.value,
        due_date=datetime.now(timezone.utc) + due_in,
    )
    db.add(task)
    db.commit()
    return task


# Staff and Manager status tables, written out independently of task_rules
TRANSITION_TABLE = {
    Role.STAFF: {
        TaskStatus.PENDING: {TaskStatus.IN_PROGRESS},
        TaskStatus.IN_PROGRESS: {TaskStatus.AWAITING_APPROVAL, TaskStatus.PENDING, TaskStatus.ERROR},
        TaskStatus.AWAITING_APPROVAL: {TaskStatus.IN_PROGRESS},
        TaskStatus.COMPLETED: set(),
        TaskStatus.ERROR: {TaskStatus.IN_PROGRESS, TaskStatus.PENDING},
        TaskStatus.OVERDUE: {TaskStatus.IN_PROGRESS, TaskStatus.AWAITING_APPROVAL},
    },
    Role.MANAGER: {
        TaskStatus.PENDING: {TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED},
        TaskStatus.IN_PROGRESS: {
            TaskStatus.AWAITING_APPROVAL,
            TaskStatus.PENDING,
            TaskStatus.COMPLETED,
            TaskStatus.ERROR,
        },
        TaskStatus.AWAITING_APPROVAL: {TaskStatus.COMPLETED, TaskStatus.IN_PROGRESS},
        TaskStatus.COMPLETED: {TaskStatus.IN_PROGRESS},
        TaskStatus.ERROR: {TaskStatus.IN_PROGRESS, TaskStatus.PENDING, TaskStatus.COMPLETED},
        TaskStatus.OVERDUE: {TaskStatus.IN_PROGRESS, TaskStatus.AWAITING_APPROVAL, TaskStatus.COMPLETED},
    },
}


# =============================================================================
# Organization Fixtures
# =============================================================================

@dataclass
class Org:
    """
    owner
    ├── manager
    │   └── staff          (mapped to firm_a)
    └── staff2             (mapped to firm_c)

    manager is mapped to firm_b; firm_d is unmapped. All firms are created
    by the owner for one client.
    """
    owner: User
    manager: User
    staff: User
    staff2: User
    client: Client
    firm_a: Firm
    firm_b: Firm
    firm_c: Firm
    firm_d: Firm


@pytest.fixture(scope="function")
def org(db: Session) -> Org:
    owner = make_user(db, Role.OWNER)
    manager = make_user(db, Role.MANAGER, reports_to=owner)
    staff = make_user(db, Role.STAFF, reports_to=manager)
    staff2 = make_user(db, Role.STAFF, reports_to=owner, name="staff2")

    client = make_client(db, owner)
    firm_a = make_firm(db, owner, client, "Acme Traders")
    firm_b = make_firm(db, owner, client, "Acme Exports")
    firm_c = make_firm(db, owner, client, "Acme Retail")
    firm_d = make_firm(db, owner, client, "Acme Dormant")

    assign(db, staff, firm_a, by=owner)
    assign(db, manager, firm_b, by=owner)
    assign(db, staff2, firm_c, by=owner)

    return Org(owner, manager, staff, staff2, client, firm_a, firm_b, firm_c, firm_d)


@dataclass
class OtherOrg:
    owner: User
    staff: User
    firm: Firm


@pytest.fixture(scope="function")
def other_org(db: Session) -> OtherOrg:
    owner = make_user(db, Role.OWNER, name="other-owner")
    staff = make_user(db, Role.STAFF, reports_to=owner, name="other-staff")
    client = make_client(db, owner, name="Globex")
    firm = make_firm(db, owner, client, "Globex Industries")
    assign(db, staff, firm, by=owner)
    return OtherOrg(owner, staff, firm)


@dataclass
class Solo:
    user: User
    firm: Firm


@pytest.fixture(scope="function")
def individual(db: Session) -> Solo:
    user = make_user(db, Role.INDIVIDUAL)
    client = make_client(db, user, name="Initech")
    firm = make_firm(db, user, client, "Initech Consulting")
    assign(db, user, firm, by=user)
    return Solo(user, firm)


@pytest.fixture(scope="function")
def scope_for(db: Session):
    """Resolve the access scope for a user."""
    def _scope(user: User):
        return resolve_access_scope(db, user.id, user.role)
    return _scope


# =============================================================================
# Auth / Client Fixtures
# =============================================================================

def token_for(user: User) -> str:
    return create_session_token(
        user_id=user.id,
        role=user.role,
        token_version=user.token_version,
    )


@pytest.fixture(scope="function")
async def client_for(db: Session) -> AsyncGenerator:
    """
    Factory for AsyncClients authenticated as a given user.

    Sends the session cookie and, unless csrf=False, the CSRF header.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    clients: list[AsyncClient] = []

    def _client(user: User | None = None, csrf: bool = True) -> AsyncClient:
        headers = {CSRF_HEADER: CSRF_HEADER_VALUE} if csrf else {}
        cookies = {COOKIE_NAME: token_for(user)} if user else {}
        c = AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers=headers,
            cookies=cookies,
        )
        clients.append(c)
        return c

    yield _client

    for c in clients:
        await c.aclose()
    app.dependency_overrides.clear()
