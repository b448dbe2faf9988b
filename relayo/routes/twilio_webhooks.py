"""
Twilio Webhook Routes
Receives inbound SMS pushed by Twilio
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..config import PUBLIC_BASE_URL, TWILIO_WEBHOOK_SECRET
from ..database import get_db
from ..domain.messages.service import MessageService
from ..services.twilio_service import verify_twilio_signature

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/webhooks", tags=["Webhooks"])

EMPTY_TWIML = '<?xml version="1.0" encoding="UTF-8"?><Response></Response>'


def _twiml_ack() -> Response:
    return Response(content=EMPTY_TWIML, media_type="text/xml")


def _public_url(request: Request) -> str:
    # Behind a proxy the URL Twilio signed is the public one, not what we see
    if PUBLIC_BASE_URL:
        query = f"?{request.url.query}" if request.url.query else ""
        return f"{PUBLIC_BASE_URL}{request.url.path}{query}"
    return str(request.url)


@router.post("/twilio-sms")
async def twilio_inbound_sms(request: Request, db: Session = Depends(get_db)):
    """
    Store an inbound SMS.

    Always answers with an empty TwiML document, whatever happened, so Twilio
    never retries or shows an error to the sender.
    """
    try:
        form = await request.form()
        params = {key: str(value) for key, value in form.items()}

        signature = request.headers.get("X-Twilio-Signature")
        if not verify_twilio_signature(TWILIO_WEBHOOK_SECRET, signature, _public_url(request), params):
            logger.warning("🚫 Invalid Twilio webhook signature, ignoring request")
            return _twiml_ack()

        from_number = params.get("From")
        to_number = params.get("To")
        if not from_number or not to_number:
            logger.warning("⚠️ Twilio webhook missing From/To")
            return _twiml_ack()

        MessageService(db).record_inbound_sms(
            from_number=from_number,
            to_number=to_number,
            body=params.get("Body", ""),
            provider_message_id=params.get("MessageSid"),
        )
    except Exception:
        logger.exception("❌ Error processing Twilio webhook")
        db.rollback()

    return _twiml_ack()
