"""Task and approval enums."""

from enum import Enum


class TaskStatus(str, Enum):
    """Task lifecycle states. PENDING is the initial state on creation."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    AWAITING_APPROVAL = "awaiting_approval"
    COMPLETED = "completed"
    ERROR = "error"
    OVERDUE = "overdue"


class TaskPriority(str, Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ApprovalStatus(str, Enum):
    """Approval decision state."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
