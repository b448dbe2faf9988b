"""Reservation domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ...shared.schemas import CustomerBrief, UTCDateTime
from ...shared.validators import normalize_phone, validate_email

ReservationStatus = Literal["confirmed", "pending", "cancelled", "completed", "no-show"]
ReservationSource = Literal["WEB", "CALENDAR_SYNC", "MANUAL", "PHONE", "SMS"]
NotifyBy = Literal["SMS", "EMAIL", "NONE"]


class ReservationCreate(BaseModel):
    """Schema for booking a reservation (creates the calendar event too)"""

    model_config = ConfigDict(extra="forbid")

    customerName: Optional[str] = None
    customerPhone: Optional[str] = None
    customerEmail: Optional[str] = None
    service: str
    staff: Optional[str] = None
    start: datetime
    end: datetime
    notes: Optional[str] = None
    notifyBy: Optional[NotifyBy] = None
    calendarId: Optional[str] = None
    source: ReservationSource = "WEB"

    @field_validator("customerPhone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v)

    @field_validator("customerEmail")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @field_validator("service")
    @classmethod
    def validate_service(cls, v):
        if not v.strip():
            raise ValueError("Service cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def require_contact(self):
        if not self.customerPhone and not self.customerEmail:
            raise ValueError("Customer phone or email is required")
        return self


class ReservationUpdate(BaseModel):
    """Schema for editing a reservation; only provided fields change"""

    model_config = ConfigDict(extra="forbid")

    status: Optional[ReservationStatus] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    notes: Optional[str] = None
    notifyBy: Optional[NotifyBy] = None


class ReservationResponse(BaseModel):
    id: int
    eventId: str
    calendarId: Optional[str] = None
    title: str
    service: Optional[str] = None
    staff: Optional[str] = None
    source: str
    status: str
    notes: Optional[str] = None
    start: UTCDateTime
    end: UTCDateTime
    customerId: Optional[int] = None
    integrationId: Optional[int] = None
    customer: Optional[CustomerBrief] = None
    createdAt: UTCDateTime
    updatedAt: UTCDateTime

    @classmethod
    def from_model(cls, reservation, include_customer: bool = True) -> "ReservationResponse":
        return cls(
            id=reservation.id,
            eventId=reservation.event_id,
            calendarId=reservation.calendar_id,
            title=reservation.title,
            service=reservation.service,
            staff=reservation.staff,
            source=reservation.source,
            status=reservation.status,
            notes=reservation.notes,
            start=reservation.start,
            end=reservation.end,
            customerId=reservation.customer_id,
            integrationId=reservation.integration_id,
            customer=CustomerBrief.from_model(reservation.customer) if include_customer else None,
            createdAt=reservation.created_at,
            updatedAt=reservation.updated_at,
        )
