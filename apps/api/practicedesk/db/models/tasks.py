"""SQLAlchemy ORM models for tasks and their approvals."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from practicedesk.db.base import Base
from practicedesk.db.enums import (
    DEFAULT_APPROVAL_STATUS,
    DEFAULT_TASK_PRIORITY,
    DEFAULT_TASK_STATUS,
)

if TYPE_CHECKING:
    from practicedesk.db.models.auth import User
    from practicedesk.db.models.firms import Firm


class Task(Base):
    """
    Work item for a firm.

    Status changes go through task_workflow_service only; it keeps the
    Approval row in lock-step with the status.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_firm_status", "firm_id", "status"),
        Index("idx_tasks_assigned_to", "assigned_to_user_id"),
        Index("idx_tasks_due", "due_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    firm_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("firms.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_to_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_by_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    priority: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_TASK_PRIORITY.value, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(30), default=DEFAULT_TASK_STATUS.value, nullable=False
    )
    due_date: Mapped[datetime] = mapped_column(nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    firm: Mapped["Firm"] = relationship()
    assigned_to: Mapped["User"] = relationship(foreign_keys=[assigned_to_user_id])
    created_by: Mapped["User"] = relationship(foreign_keys=[created_by_user_id])
    approval: Mapped["Approval | None"] = relationship(
        back_populates="task", uselist=False, cascade="all, delete-orphan"
    )


class Approval(Base):
    """
    Approval request for a task (at most one per task, reset in place per cycle).

    Mirrors the task: a PENDING approval exists while the task awaits review.
    """

    __tablename__ = "approvals"
    __table_args__ = (Index("idx_approvals_status", "status"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_APPROVAL_STATUS.value, nullable=False
    )
    requested_by_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    approved_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    task: Mapped["Task"] = relationship(back_populates="approval")
    requested_by: Mapped["User"] = relationship(foreign_keys=[requested_by_user_id])
    approved_by: Mapped["User | None"] = relationship(foreign_keys=[approved_by_user_id])
