"""
Dashboard Routes
Headline statistics and the calendar feed for the dashboard
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..config import AVERAGE_SERVICE_PRICE
from ..database import get_db
from ..domain.reservations.repository import ReservationRepository
from ..domain.reservations.schemas import ReservationResponse
from ..models import Customer, Reservation, User
from ..shared.timeutils import to_naive_utc, utcnow

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Dashboard"])


class DashboardStats(BaseModel):
    todayBookings: int
    totalCustomers: int
    pendingConfirmations: int
    thisWeekRevenue: float


@router.get("/stats", response_model=DashboardStats)
async def get_stats(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Today's bookings, customer count, pending confirmations and this week's revenue (UTC days)"""
    workspace_id = current_user.workspace_id

    today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)
    # Weeks start on Sunday
    week_start = today - timedelta(days=(today.weekday() + 1) % 7)
    week_end = week_start + timedelta(days=7)

    reservations = db.query(Reservation).filter(Reservation.workspace_id == workspace_id)

    today_bookings = reservations.filter(Reservation.start >= today, Reservation.start < tomorrow).count()
    pending = reservations.filter(Reservation.status == "pending").count()
    week_confirmed = reservations.filter(
        Reservation.start >= week_start,
        Reservation.start < week_end,
        Reservation.status == "confirmed",
    ).count()
    total_customers = db.query(Customer).filter(Customer.workspace_id == workspace_id).count()

    return DashboardStats(
        todayBookings=today_bookings,
        totalCustomers=total_customers,
        pendingConfirmations=pending,
        thisWeekRevenue=week_confirmed * AVERAGE_SERVICE_PRICE,
    )


@router.get("/calendar/events", response_model=list[ReservationResponse])
async def get_calendar_events(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Reservations for the calendar view, oldest first"""
    reservations = ReservationRepository.get_in_range(
        db, current_user.workspace_id, start=to_naive_utc(start), end=to_naive_utc(end)
    )
    return [ReservationResponse.from_model(r) for r in reservations]
