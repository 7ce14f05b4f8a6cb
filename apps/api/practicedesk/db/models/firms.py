"""SQLAlchemy ORM models for clients, firms and staff assignments."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from practicedesk.db.base import Base

if TYPE_CHECKING:
    from practicedesk.db.models.auth import User


class Client(Base):
    """A client of the practice. Owned by the organization of its creator."""

    __tablename__ = "clients"
    __table_args__ = (Index("idx_clients_created_by", "created_by_user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_by_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    firms: Mapped[list["Firm"]] = relationship(back_populates="client")


class Firm(Base):
    """
    A client's business entity.

    Compliance attributes (entity type, GST/TDS/ROC flags) are stored for the
    compliance calendar and never interpreted here.
    """

    __tablename__ = "firms"
    __table_args__ = (
        Index("idx_firms_created_by", "created_by_user_id"),
        Index("idx_firms_client", "client_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    pan: Mapped[str | None] = mapped_column(String(20), nullable=True)
    gstin: Mapped[str | None] = mapped_column(String(20), nullable=True)
    gst_applicable: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    tds_applicable: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    roc_applicable: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    created_by_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    client: Mapped["Client"] = relationship(back_populates="firms")
    created_by: Mapped["User"] = relationship(foreign_keys=[created_by_user_id])

    @property
    def client_name(self) -> str | None:
        return self.client.name if self.client else None


class UserFirmMapping(Base):
    """
    Assignment of a user to a firm.

    Constraint: UNIQUE(user_id, firm_id), a user is assigned to a firm at most once.
    """

    __tablename__ = "user_firm_mappings"
    __table_args__ = (
        UniqueConstraint("user_id", "firm_id", name="uq_user_firm_mapping"),
        Index("idx_user_firm_mappings_firm", "firm_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    firm_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("firms.id", ondelete="CASCADE"), nullable=False
    )
    assigned_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    assigned_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    firm: Mapped["Firm"] = relationship()
