"""
Twilio SMS Service
Sends SMS through the Twilio REST API and verifies inbound webhook signatures
"""

import base64
import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from ..models_integration import Integration
from ..security import decrypt_credential

logger = logging.getLogger(__name__)

TWILIO_API = "https://api.twilio.com/2010-04-01"
REQUEST_TIMEOUT = 10.0


class TwilioAPIError(Exception):
    """Sending through Twilio failed"""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


@dataclass
class SentMessage:
    sid: Optional[str]
    status: Optional[str]
    to: Optional[str] = None
    from_number: Optional[str] = None


class TwilioService:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    async def send_sms(self, integration: Integration, to: str, body: str) -> SentMessage:
        """
        Send SMS via Twilio

        Args:
            integration: The workspace's Twilio integration (credentials are decrypted here)
            to: Recipient phone number
            body: SMS message content

        Raises:
            TwilioAPIError: When credentials are missing or Twilio rejects the message
        """
        if not integration.twilio_account_sid or not integration.twilio_auth_token:
            raise TwilioAPIError("Twilio integration not configured")

        account_sid = decrypt_credential(integration.twilio_account_sid)
        auth_token = decrypt_credential(integration.twilio_auth_token)

        logger.info(f"🚀 Sending SMS to Twilio API for {to}")
        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=self.transport) as client:
                response = await client.post(
                    f"{TWILIO_API}/Accounts/{account_sid}/Messages.json",
                    auth=(account_sid, auth_token),
                    data={"To": to, "From": integration.twilio_from_number, "Body": body},
                )
        except httpx.HTTPError as e:
            logger.error(f"❌ Twilio API error: {e}")
            raise TwilioAPIError(str(e)) from e

        logger.info(f"📡 Twilio API response status: {response.status_code}")

        if response.status_code not in (200, 201):
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            error_message = error_data.get("message", "Unknown error")
            error_code = error_data.get("code")
            logger.error(f"❌ Twilio API error [{error_code}]: {error_message}")
            raise TwilioAPIError(error_message, code=error_code)

        result = response.json()
        logger.info(f"✅ SMS sent successfully to {to} (SID: {result.get('sid')})")
        return SentMessage(
            sid=result.get("sid"),
            status=result.get("status"),
            to=result.get("to"),
            from_number=result.get("from"),
        )


def compute_twilio_signature(secret: str, url: str, params: Mapping[str, str]) -> str:
    """HMAC-SHA1 over the full URL followed by each POST param name+value, sorted by name"""
    payload = url + "".join(f"{key}{params[key]}" for key in sorted(params))
    digest = hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_twilio_signature(
    secret: Optional[str], signature: Optional[str], url: str, params: Mapping[str, str]
) -> bool:
    if not secret:
        logger.debug("TWILIO_WEBHOOK_SECRET not set, skipping signature verification")
        return True
    if not signature:
        return False
    return hmac.compare_digest(compute_twilio_signature(secret, url, params), signature)
