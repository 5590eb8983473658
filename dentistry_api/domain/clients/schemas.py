"""Client domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_name, validate_phone


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    name: str
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return validate_name(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class ClientUpdate(BaseModel):
    """Schema for updating an existing client; null clears phone or email"""

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if v is None:
            raise ValueError("Name cannot be null")
        return validate_name(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class ClientResponse(BaseModel):
    """Client as listed on the dashboard, with visit summary derived from appointments"""

    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    lastVisit: str = "-"
    nextAppointment: Optional[str] = None
    totalVisits: int = 0
