"""Reservation service - Booking, editing and cancelling appointments"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Customer, Reservation, User
from ...models_integration import Integration, IntegrationProvider
from ...services import sms_templates
from ...services.google_calendar_service import GoogleAPIError, GoogleCalendarService, build_event_body
from ...services.google_sheets_service import GoogleSheetsService
from ...services.twilio_service import TwilioService
from ...shared.timeutils import to_naive_utc, utcnow
from ..customers.service import CustomerService
from ..integrations.repository import IntegrationRepository
from ..messages.repository import MessageRepository
from .repository import ReservationRepository
from .schemas import ReservationCreate, ReservationUpdate
from .sync import mirror_reservation

logger = logging.getLogger(__name__)


class ReservationService:
    """Service layer for reservation business logic"""

    def __init__(
        self,
        db: Session,
        calendar: GoogleCalendarService,
        sheets: GoogleSheetsService,
        twilio: TwilioService,
    ):
        self.db = db
        self.calendar = calendar
        self.sheets = sheets
        self.twilio = twilio
        self.repo = ReservationRepository()

    def get_reservations(
        self,
        user: User,
        status: Optional[str] = None,
        source: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Reservation]:
        return self.repo.get_reservations(self.db, user.workspace_id, status=status, source=source, search=search)

    def get_reservation(self, reservation_id: int, user: User) -> Reservation:
        reservation = self.repo.get_reservation_by_id(self.db, reservation_id, user.workspace_id)
        if not reservation:
            raise HTTPException(status_code=404, detail="Reservation not found")
        return reservation

    async def create_reservation(self, data: ReservationCreate, user: User) -> Reservation:
        """
        Book a reservation.

        The calendar event is the primary write: if Google rejects it nothing is
        stored. The sheet mirror and SMS confirmation are best effort.
        """
        integration = IntegrationRepository.get_by_provider(self.db, user.workspace_id, IntegrationProvider.GOOGLE)
        if not integration:
            raise HTTPException(status_code=400, detail="Google Calendar not connected")

        calendar_id = data.calendarId or (integration.google_calendar_ids or ["primary"])[0]
        start = to_naive_utc(data.start)
        end = to_naive_utc(data.end)
        customer_label = data.customerName or data.customerPhone or data.customerEmail
        title = f"{data.service} - {customer_label}"

        customer = CustomerService(self.db).find_or_create(
            user.workspace_id,
            name=data.customerName,
            phone=data.customerPhone,
            email=data.customerEmail,
        )

        try:
            event = await self.calendar.create_event(
                integration,
                calendar_id,
                build_event_body(
                    summary=title,
                    start=start,
                    end=end,
                    description=data.notes,
                    attendees=[data.customerEmail] if data.customerEmail else None,
                ),
            )
        except GoogleAPIError as e:
            logger.error(f"❌ Failed to create calendar event for workspace {user.workspace_id}: {e}")
            raise HTTPException(status_code=502, detail="Failed to create calendar event") from e

        reservation = self.repo.create_reservation(
            self.db,
            user.workspace_id,
            customer_id=customer.id,
            integration_id=integration.id,
            event_id=event["id"],
            calendar_id=calendar_id,
            title=title,
            service=data.service,
            staff=data.staff,
            source=data.source,
            status="confirmed",
            notes=data.notes,
            start=start,
            end=end,
        )
        logger.info(f"✅ Reservation {reservation.id} booked (event {reservation.event_id})")

        await mirror_reservation(self.sheets, integration, reservation, utcnow())

        if data.notifyBy == "SMS" and customer.phone:
            await self._notify(
                user.workspace_id,
                customer,
                sms_templates.confirmation(customer.name, data.service, start, data.staff),
            )

        return reservation

    async def update_reservation(self, reservation_id: int, data: ReservationUpdate, user: User) -> Reservation:
        reservation = self.get_reservation(reservation_id, user)
        integration = reservation.integration

        updates = data.model_dump(exclude_unset=True, exclude={"notifyBy"})
        for key in ("start", "end"):
            if updates.get(key) is not None:
                updates[key] = to_naive_utc(updates[key])
            else:
                updates.pop(key, None)
        if updates.get("status") is None:
            updates.pop("status", None)

        time_changed = "start" in updates or "end" in updates
        if integration and time_changed:
            try:
                await self.calendar.update_event(
                    integration,
                    reservation.calendar_id or "primary",
                    reservation.event_id,
                    build_event_body(start=updates.get("start"), end=updates.get("end")),
                )
            except GoogleAPIError as e:
                logger.error(f"❌ Failed to update calendar event {reservation.event_id}: {e}")
                raise HTTPException(status_code=502, detail="Failed to update calendar event") from e

        reservation = self.repo.update_reservation(self.db, reservation, **updates)

        if integration:
            await mirror_reservation(self.sheets, integration, reservation, utcnow())

        if data.notifyBy == "SMS" and reservation.customer and reservation.customer.phone:
            service_name = reservation.service or reservation.title
            if updates.get("status") == "cancelled":
                body = sms_templates.cancellation(service_name, reservation.start)
            elif time_changed:
                body = sms_templates.reschedule(service_name, reservation.start)
            else:
                body = None
            if body:
                await self._notify(user.workspace_id, reservation.customer, body)

        return reservation

    async def delete_reservation(self, reservation_id: int, user: User) -> None:
        reservation = self.get_reservation(reservation_id, user)

        if reservation.integration:
            try:
                await self.calendar.delete_event(
                    reservation.integration, reservation.calendar_id or "primary", reservation.event_id
                )
            except Exception:
                logger.exception(f"❌ Error deleting event {reservation.event_id} from Google Calendar")

        self.repo.delete_reservation(self.db, reservation)
        logger.info(f"🗑️ Reservation {reservation_id} deleted")

    async def _notify(self, workspace_id: int, customer: Customer, body: str) -> None:
        """Best-effort SMS to a customer through the workspace's Twilio number"""
        twilio_integration: Optional[Integration] = IntegrationRepository.get_by_provider(
            self.db, workspace_id, IntegrationProvider.TWILIO
        )
        if not twilio_integration:
            logger.info(f"ℹ️ Twilio not connected for workspace {workspace_id}, skipping SMS")
            return

        try:
            sent = await self.twilio.send_sms(twilio_integration, customer.phone, body)
        except Exception:
            logger.exception(f"❌ Error sending SMS notification to customer {customer.id}")
            return

        MessageRepository.create_message(
            self.db,
            workspace_id,
            customer_id=customer.id,
            direction="outbound",
            channel="sms",
            body=body,
            to_number=customer.phone,
            from_number=twilio_integration.twilio_from_number,
            provider_message_id=sent.sid,
        )
