"""Message service - Outbound SMS, inbound SMS intake and conversation summaries"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Message, User
from ...models_integration import IntegrationProvider
from ...services.twilio_service import TwilioAPIError, TwilioService
from ..customers.repository import CustomerRepository
from ..customers.service import CustomerService
from ..integrations.repository import IntegrationRepository
from .conversations import ConversationSummary, summarize_conversations
from .repository import MessageRepository
from .schemas import SendSmsRequest

logger = logging.getLogger(__name__)


class MessageService:
    """Service layer for message business logic"""

    def __init__(self, db: Session, twilio: Optional[TwilioService] = None):
        self.db = db
        self.twilio = twilio
        self.repo = MessageRepository()

    def get_conversations(self, user: User) -> list[ConversationSummary]:
        messages = self.repo.get_workspace_messages(self.db, user.workspace_id)
        return summarize_conversations(messages)

    async def send_sms(self, data: SendSmsRequest, user: User) -> Message:
        """Send an SMS through the workspace's Twilio number and log it as outbound"""
        integration = IntegrationRepository.get_by_provider(self.db, user.workspace_id, IntegrationProvider.TWILIO)
        if not integration:
            raise HTTPException(status_code=400, detail="Twilio not connected")

        if data.customerId is not None:
            customer = CustomerRepository.get_customer_by_id(self.db, data.customerId, user.workspace_id)
            if not customer:
                raise HTTPException(status_code=404, detail="Customer not found")

        try:
            sent = await self.twilio.send_sms(integration, data.to, data.body)
        except TwilioAPIError as e:
            logger.error(f"❌ Failed to send SMS for workspace {user.workspace_id}: {e}")
            raise HTTPException(status_code=502, detail="Failed to send SMS") from e

        return self.repo.create_message(
            self.db,
            user.workspace_id,
            customer_id=data.customerId,
            direction="outbound",
            channel="sms",
            body=data.body,
            to_number=data.to,
            from_number=integration.twilio_from_number,
            provider_message_id=sent.sid,
        )

    def record_inbound_sms(
        self, from_number: str, to_number: str, body: str, provider_message_id: Optional[str]
    ) -> Optional[Message]:
        """
        Store an inbound SMS against the workspace that owns ``to_number``.

        The sender is resolved to a customer by phone (created on first contact,
        named after the number). Returns None when no workspace owns the number.
        """
        integration = IntegrationRepository.get_twilio_by_number(self.db, to_number)
        if not integration:
            logger.warning(f"⚠️ No Twilio integration found for number: {to_number}")
            return None

        customer = CustomerService(self.db).find_or_create(
            integration.workspace_id, name=from_number, phone=from_number, commit=False
        )

        message = self.repo.create_message(
            self.db,
            integration.workspace_id,
            customer_id=customer.id,
            direction="inbound",
            channel="sms",
            body=body or "",
            from_number=from_number,
            to_number=to_number,
            provider_message_id=provider_message_id,
        )
        logger.info(f"📥 Inbound SMS stored for workspace {integration.workspace_id} (customer {customer.id})")
        return message
