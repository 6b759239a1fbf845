"""Company schemas."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

CompanyStatus = Literal["active", "trial", "suspended", "test"]


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100, description="Company name")
    contact_email: EmailStr = Field(..., description="Primary contact email")
    status: CompanyStatus = Field(default="active", description="Initial status")


class CompanyStatusUpdate(BaseModel):
    status: CompanyStatus


class CompanyResponse(BaseModel):
    id: UUID
    name: str
    contact_email: str
    status: str
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


__all__ = ["CompanyCreate", "CompanyResponse", "CompanyStatus", "CompanyStatusUpdate"]
