"""Participant schemas.

Field-level business rules (name length, NDIS format, date of birth) are
enforced in ParticipantService so callers get the same messages from every
entry point; these models only fix the shape and enumerations.
"""

from datetime import date, datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

SupportLevel = Literal["high", "medium", "low"]
ParticipantStatus = Literal["active", "inactive", "discharged"]


class ParticipantCreate(BaseModel):
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    date_of_birth: str = Field(..., description="ISO date of birth (YYYY-MM-DD)")
    ndis_number: str = Field(..., description="Nine-digit NDIS number")
    contact_phone: Optional[str] = Field(None, description="Contact phone number")
    emergency_contact: Optional[str] = Field(None, description="Emergency contact details")
    support_level: SupportLevel = Field(..., description="Support intensity")
    care_notes: Optional[str] = Field(None, description="Care notes (max 500 characters)")
    status: ParticipantStatus = Field(default="active", description="Initial status")


class ParticipantUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    ndis_number: Optional[str] = None
    contact_phone: Optional[str] = None
    emergency_contact: Optional[str] = None
    support_level: Optional[SupportLevel] = None
    care_notes: Optional[str] = None


class ParticipantStatusUpdate(BaseModel):
    status: ParticipantStatus
    reason: Optional[str] = Field(None, description="Required when discharging")


class ParticipantResponse(BaseModel):
    id: UUID
    company_id: UUID
    first_name: str
    last_name: str
    date_of_birth: date
    ndis_number: str
    contact_phone: Optional[str] = None
    emergency_contact: Optional[str] = None
    support_level: str
    care_notes: Optional[str] = None
    status: str
    created_by: UUID
    updated_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "ParticipantCreate",
    "ParticipantResponse",
    "ParticipantStatus",
    "ParticipantStatusUpdate",
    "ParticipantUpdate",
    "SupportLevel",
]
