"""Reservation router - FastAPI endpoints for reservation operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...providers import get_calendar_service, get_sheets_service, get_twilio_service
from ...services.google_calendar_service import GoogleCalendarService
from ...services.google_sheets_service import GoogleSheetsService
from ...services.twilio_service import TwilioService
from .schemas import ReservationCreate, ReservationResponse, ReservationSource, ReservationStatus, ReservationUpdate
from .service import ReservationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["Reservations"])


def get_reservation_service(
    db: Session = Depends(get_db),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
    sheets: GoogleSheetsService = Depends(get_sheets_service),
    twilio: TwilioService = Depends(get_twilio_service),
) -> ReservationService:
    """Dependency injection for ReservationService"""
    return ReservationService(db, calendar, sheets, twilio)


@router.get("", response_model=list[ReservationResponse])
async def get_reservations(
    status: Optional[ReservationStatus] = Query(None),
    source: Optional[ReservationSource] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    current_user: User = Depends(get_current_user),
    service: ReservationService = Depends(get_reservation_service),
):
    reservations = service.get_reservations(current_user, status=status, source=source, search=search)
    return [ReservationResponse.from_model(r) for r in reservations]


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    data: ReservationCreate,
    current_user: User = Depends(get_current_user),
    service: ReservationService = Depends(get_reservation_service),
):
    """Book a reservation: calendar event first, then the local record"""
    reservation = await service.create_reservation(data, current_user)
    return ReservationResponse.from_model(reservation)


@router.patch("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: int,
    data: ReservationUpdate,
    current_user: User = Depends(get_current_user),
    service: ReservationService = Depends(get_reservation_service),
):
    reservation = await service.update_reservation(reservation_id, data, current_user)
    return ReservationResponse.from_model(reservation)


@router.delete("/{reservation_id}")
async def delete_reservation(
    reservation_id: int,
    current_user: User = Depends(get_current_user),
    service: ReservationService = Depends(get_reservation_service),
):
    await service.delete_reservation(reservation_id, current_user)
    return {"success": True}
