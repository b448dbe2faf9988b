"""
Reservation Sync

Pulls events from every Google integration's configured calendars, reconciles
them against local reservations by event id, and mirrors each result into the
integration's spreadsheet when one is configured.

Reconciliation rules:
- Existing reservation: title, start and end follow the calendar. Status only
  changes when the calendar reports the event as cancelled; any other remote
  status leaves the local one alone (a locally completed booking stays completed).
- New event: stored as a CALENDAR_SYNC reservation, confirmed, on the
  integration's first calendar, with the service name taken from the title.

Integrations are processed one after another. A failure in one is logged and
rolled back without stopping the others; a failed sheet mirror is logged and
never undoes the reservation write.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from ...config import SYNC_FUTURE_DAYS, SYNC_PAST_DAYS
from ...models import Reservation
from ...models_integration import Integration
from ...services.google_calendar_service import CalendarEvent, GoogleCalendarService
from ...services.google_sheets_service import GoogleSheetsService
from ...shared.timeutils import isoformat_utc, utcnow
from ..integrations.repository import IntegrationRepository
from .repository import ReservationRepository

logger = logging.getLogger(__name__)

SHEET_TAB = "Appointments"
SERVICE_DELIMITER = " - "
DEFAULT_SERVICE_NAME = "Service"


def derive_service_name(title: Optional[str]) -> str:
    """'Haircut - Jane Doe' -> 'Haircut'; titles without the delimiter get the generic label"""
    if not title or SERVICE_DELIMITER not in title:
        return DEFAULT_SERVICE_NAME
    prefix = title.split(SERVICE_DELIMITER, 1)[0].strip()
    return prefix or DEFAULT_SERVICE_NAME


def build_sheet_row(reservation: Reservation, synced_at: datetime) -> list:
    customer = reservation.customer
    return [
        reservation.event_id,
        reservation.status,
        reservation.service,
        reservation.staff,
        reservation.source,
        isoformat_utc(reservation.start),
        isoformat_utc(reservation.end),
        customer.name if customer else "",
        customer.phone if customer else "",
        customer.email if customer else "",
        isoformat_utc(synced_at),
    ]


async def mirror_reservation(
    sheets: GoogleSheetsService, integration: Integration, reservation: Reservation, synced_at: datetime
) -> bool:
    """Best-effort upsert of one reservation row; returns False (after logging) on failure"""
    if not integration.google_sheets_url:
        return False
    try:
        await sheets.upsert_row_by_key(
            integration,
            integration.google_sheets_url,
            SHEET_TAB,
            reservation.event_id,
            build_sheet_row(reservation, synced_at),
        )
        return True
    except Exception:
        logger.exception(f"❌ Error mirroring reservation {reservation.event_id} to Sheets")
        return False


@dataclass
class SyncReport:
    synced: int = 0
    # integration id -> events processed, for integrations that completed
    events: Dict[int, int] = field(default_factory=dict)
    failed: List[int] = field(default_factory=list)


class ReservationSyncService:
    """Reconciles calendar events into reservations for every syncable integration"""

    def __init__(
        self,
        db: Session,
        calendar: GoogleCalendarService,
        sheets: GoogleSheetsService,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.calendar = calendar
        self.sheets = sheets
        self.clock = clock
        self.repo = ReservationRepository()

    async def run(self) -> SyncReport:
        integrations = IntegrationRepository.get_syncable_google_integrations(self.db)
        report = SyncReport(synced=len(integrations))

        for integration in integrations:
            # Capture before any rollback expires the instance
            integration_id = integration.id
            workspace_id = integration.workspace_id
            try:
                count = await self.sync_integration(integration)
                report.events[integration_id] = count
                logger.info(f"🔄 Synced {count} events for workspace {workspace_id} (integration {integration_id})")
            except Exception:
                logger.exception(f"❌ Error syncing integration {integration_id}")
                self.db.rollback()
                report.failed.append(integration_id)

        return report

    async def sync_integration(self, integration: Integration) -> int:
        now = self.clock()
        time_min = now - timedelta(days=SYNC_PAST_DAYS)
        time_max = now + timedelta(days=SYNC_FUTURE_DAYS)

        events = await self.calendar.list_events(
            integration, list(integration.google_calendar_ids), time_min, time_max
        )

        processed = 0
        for event in events:
            reservation = self.upsert_event(integration, event)
            if reservation is None:
                continue
            processed += 1

            if integration.google_sheets_url:
                reservation = self.repo.get_with_customer(self.db, reservation.id)
                await mirror_reservation(self.sheets, integration, reservation, self.clock())

        return processed

    def upsert_event(self, integration: Integration, event: CalendarEvent) -> Optional[Reservation]:
        existing = self.repo.get_by_event_id(self.db, event.id)

        if existing:
            updates = {}
            # Deleted-event stubs carry only id and status
            if event.start or event.status != "cancelled":
                updates["title"] = event.summary
            if event.start:
                updates["start"] = event.start
            if event.end:
                updates["end"] = event.end
            if event.status == "cancelled":
                updates["status"] = "cancelled"
            return self.repo.update_reservation(self.db, existing, **updates)

        if not event.start or not event.end:
            logger.warning(f"⚠️ Skipping event {event.id}: missing start/end")
            return None

        return self.repo.create_reservation(
            self.db,
            integration.workspace_id,
            integration_id=integration.id,
            event_id=event.id,
            calendar_id=integration.google_calendar_ids[0],
            title=event.summary,
            service=derive_service_name(event.summary),
            source="CALENDAR_SYNC",
            status="confirmed",
            start=event.start,
            end=event.end,
        )
