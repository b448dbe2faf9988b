"""Message domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...shared.schemas import UTCDateTime
from ...shared.validators import normalize_phone


class SendSmsRequest(BaseModel):
    """Schema for sending an outbound SMS"""

    model_config = ConfigDict(extra="forbid")

    to: str
    body: str
    customerId: Optional[int] = None

    @field_validator("to")
    @classmethod
    def validate_to(cls, v):
        return normalize_phone(v)

    @field_validator("body")
    @classmethod
    def validate_body(cls, v):
        if not v.strip():
            raise ValueError("Message body cannot be empty")
        if len(v) > 1600:
            raise ValueError("Message body cannot exceed 1600 characters")
        return v


class MessageResponse(BaseModel):
    id: int
    customerId: Optional[int] = None
    direction: str
    channel: str
    body: str
    fromNumber: Optional[str] = None
    toNumber: Optional[str] = None
    providerMessageId: Optional[str] = None
    createdAt: UTCDateTime

    @classmethod
    def from_model(cls, message) -> "MessageResponse":
        return cls(
            id=message.id,
            customerId=message.customer_id,
            direction=message.direction,
            channel=message.channel,
            body=message.body,
            fromNumber=message.from_number,
            toNumber=message.to_number,
            providerMessageId=message.provider_message_id,
            createdAt=message.created_at,
        )
