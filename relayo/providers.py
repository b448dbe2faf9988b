"""FastAPI dependencies for the external provider clients"""

from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_db
from .services.google_calendar_service import GoogleCalendarService
from .services.google_sheets_service import GoogleSheetsService
from .services.twilio_service import TwilioService


def get_calendar_service(db: Session = Depends(get_db)) -> GoogleCalendarService:
    return GoogleCalendarService(db)


def get_sheets_service(calendar: GoogleCalendarService = Depends(get_calendar_service)) -> GoogleSheetsService:
    return GoogleSheetsService(calendar)


def get_twilio_service() -> TwilioService:
    return TwilioService()
