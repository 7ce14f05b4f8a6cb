"""Pydantic schemas for clients, firms and firm assignments."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ClientRead(BaseModel):
    """Client response."""
    id: UUID
    name: str
    email: str | None
    phone: str | None
    created_by_user_id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class FirmRead(BaseModel):
    """Firm response."""
    id: UUID
    client_id: UUID
    client_name: str | None = None
    name: str
    entity_type: str | None
    pan: str | None
    gstin: str | None
    gst_applicable: bool
    tds_applicable: bool
    roc_applicable: bool
    created_by_user_id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class AccessibleFirmsResponse(BaseModel):
    """Firm ids the caller may operate against."""
    firm_ids: list[UUID]


class FirmAssign(BaseModel):
    """Request to assign a firm to a user."""
    firm_id: UUID


class UserFirmMappingRead(BaseModel):
    """Firm assignment response."""
    id: UUID
    user_id: UUID
    firm_id: UUID
    assigned_by_user_id: UUID | None
    assigned_at: datetime

    model_config = {"from_attributes": True}


class ClientCreate(BaseModel):
    """Request to create a client."""
    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)


class ClientUpdate(BaseModel):
    """Request to update a client (partial)."""
    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)


class FirmCreate(BaseModel):
    """Request to create a firm under a client of the caller's organization."""
    client_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    entity_type: str | None = Field(None, max_length=50)
    pan: str | None = Field(None, max_length=20)
    gstin: str | None = Field(None, max_length=20)
    gst_applicable: bool = False
    tds_applicable: bool = False
    roc_applicable: bool = False


class FirmUpdate(BaseModel):
    """Request to update firm fields (partial). The client cannot change."""
    name: str | None = Field(None, min_length=1, max_length=255)
    entity_type: str | None = Field(None, max_length=50)
    pan: str | None = Field(None, max_length=20)
    gstin: str | None = Field(None, max_length=20)
    gst_applicable: bool | None = None
    tds_applicable: bool | None = None
    roc_applicable: bool | None = None
