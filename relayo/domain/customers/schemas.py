"""Customer domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ...shared.schemas import UTCDateTime
from ...shared.validators import normalize_phone, validate_email
from ..messages.schemas import MessageResponse
from ..reservations.schemas import ReservationResponse

RECENT_ACTIVITY_LIMIT = 5


class CustomerCreate(BaseModel):
    """Schema for creating a new customer"""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @model_validator(mode="after")
    def require_contact(self):
        if not self.phone and not self.email:
            raise ValueError("Phone or email is required")
        return self


class CustomerUpdate(BaseModel):
    """Schema for updating an existing customer"""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)


class CustomerResponse(BaseModel):
    """Schema for customer response, with recent activity"""

    id: int
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    createdAt: UTCDateTime
    updatedAt: UTCDateTime
    reservations: list[ReservationResponse] = []
    messages: list[MessageResponse] = []

    @classmethod
    def from_model(cls, customer) -> "CustomerResponse":
        # relationships are ordered newest first
        return cls(
            id=customer.id,
            name=customer.name,
            phone=customer.phone,
            email=customer.email,
            notes=customer.notes,
            createdAt=customer.created_at,
            updatedAt=customer.updated_at,
            reservations=[
                ReservationResponse.from_model(r, include_customer=False)
                for r in customer.reservations[:RECENT_ACTIVITY_LIMIT]
            ],
            messages=[MessageResponse.from_model(m) for m in customer.messages[:RECENT_ACTIVITY_LIMIT]],
        )
