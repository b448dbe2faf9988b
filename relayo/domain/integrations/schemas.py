"""Integration domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...shared.validators import extract_spreadsheet_id, normalize_phone


class GoogleConfigUpdate(BaseModel):
    """Calendars to sync and the spreadsheet to mirror into"""

    model_config = ConfigDict(extra="forbid")

    calendarIds: list[str] = []
    sheetsUrl: Optional[str] = None

    @field_validator("calendarIds")
    @classmethod
    def clean_calendar_ids(cls, v):
        return [calendar_id.strip() for calendar_id in v if calendar_id and calendar_id.strip()]

    @field_validator("sheetsUrl")
    @classmethod
    def validate_sheets_url(cls, v):
        if not v:
            return None
        if not extract_spreadsheet_id(v):
            raise ValueError("Invalid Google Sheets URL")
        return v.strip()


class TwilioCredentials(BaseModel):
    """Presence of all three fields is checked by the service (400 when missing)"""

    model_config = ConfigDict(extra="forbid")

    sid: Optional[str] = None
    authToken: Optional[str] = None
    fromNumber: Optional[str] = None

    @field_validator("fromNumber")
    @classmethod
    def validate_from_number(cls, v):
        return normalize_phone(v)


class IntegrationResponse(BaseModel):
    id: int
    provider: str
    label: Optional[str] = None
    calendarIds: list[str] = []
    sheetsUrl: Optional[str] = None
    fromNumber: Optional[str] = None
    googleEmail: Optional[str] = None

    @classmethod
    def from_model(cls, integration) -> "IntegrationResponse":
        return cls(
            id=integration.id,
            provider=integration.provider,
            label=integration.label,
            calendarIds=integration.google_calendar_ids or [],
            sheetsUrl=integration.google_sheets_url,
            fromNumber=integration.twilio_from_number,
            googleEmail=integration.google_user_email,
        )
