"""Response snippets shared across domains"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, PlainSerializer

from .timeutils import isoformat_utc

# Naive UTC in storage, ISO 8601 with a trailing Z on the wire
UTCDateTime = Annotated[datetime, PlainSerializer(isoformat_utc, return_type=str)]


class CustomerBrief(BaseModel):
    id: int
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_model(cls, customer) -> Optional["CustomerBrief"]:
        if customer is None:
            return None
        return cls(id=customer.id, name=customer.name, phone=customer.phone, email=customer.email)
