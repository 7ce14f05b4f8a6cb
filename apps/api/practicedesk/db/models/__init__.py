"""SQLAlchemy ORM models."""

from practicedesk.db.models.auth import User
from practicedesk.db.models.firms import Client, Firm, UserFirmMapping
from practicedesk.db.models.tasks import Approval, Task

__all__ = [
    "Approval",
    "Client",
    "Firm",
    "Task",
    "User",
    "UserFirmMapping",
]
