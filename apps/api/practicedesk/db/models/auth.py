"""SQLAlchemy ORM models for users and the reporting hierarchy."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from practicedesk.db.base import Base
from practicedesk.db.enums import Role, UserStatus


class User(Base):
    """
    Application user.

    ``reports_to_user_id`` edges form a forest; each tree is rooted at an
    Owner and that tree is the organization. Individual users are their own
    root. There is no stored organization table.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_reports_to", "reports_to_user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), default=Role.STAFF.value, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=UserStatus.ACTIVE.value, nullable=False
    )
    reports_to_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    token_version: Mapped[int] = mapped_column(
        Integer, default=1, server_default=text("1"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    reports_to: Mapped["User | None"] = relationship(
        remote_side=[id], foreign_keys=[reports_to_user_id]
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
