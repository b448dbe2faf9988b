"""Message router - conversation list and outbound SMS"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...providers import get_twilio_service
from ...services.twilio_service import TwilioService
from .schemas import MessageResponse, SendSmsRequest
from .service import MessageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["Messages"])


def get_message_service(
    db: Session = Depends(get_db), twilio: TwilioService = Depends(get_twilio_service)
) -> MessageService:
    """Dependency injection for MessageService"""
    return MessageService(db, twilio)


@router.get("")
async def get_conversations(
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
):
    """One summary per customer, most recent conversation first"""
    conversations = service.get_conversations(current_user)
    return {"conversations": [c.model_dump(mode="json") for c in conversations]}


@router.post("/sms", response_model=MessageResponse, status_code=201)
async def send_sms(
    data: SendSmsRequest,
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
):
    message = await service.send_sms(data, current_user)
    return MessageResponse.from_model(message)
