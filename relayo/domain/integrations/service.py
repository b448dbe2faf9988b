"""Integration service - Google OAuth connection and provider configuration"""

import logging
from datetime import timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET
from ...models import User, Workspace
from ...models_integration import Integration, IntegrationProvider
from ...security import encrypt_credential, load_oauth_state, sign_oauth_state
from ...services.google_calendar_service import GoogleAPIError, GoogleCalendarService
from ...shared.timeutils import utcnow
from .repository import IntegrationRepository
from .schemas import GoogleConfigUpdate, TwilioCredentials

logger = logging.getLogger(__name__)


class OAuthCallbackError(Exception):
    """OAuth callback could not be completed; ``reason`` goes into the redirect"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class IntegrationService:
    """Service layer for integration business logic"""

    def __init__(self, db: Session, calendar: Optional[GoogleCalendarService] = None):
        self.db = db
        self.calendar = calendar
        self.repo = IntegrationRepository()

    def get_integrations(self, user: User) -> list[Integration]:
        return self.repo.get_integrations(self.db, user.workspace_id)

    def google_authorization_url(self, user: User) -> str:
        if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
            raise HTTPException(status_code=500, detail="Google integration not configured")

        logger.info(f"Google OAuth initiated for workspace: {user.workspace_id}")
        return GoogleCalendarService.build_authorization_url(sign_oauth_state(user.workspace_id))

    async def complete_google_oauth(self, code: str, state: str) -> Integration:
        """
        Finish the consent flow for the workspace carried in ``state``.

        Raises:
            OAuthCallbackError: With a short reason code for the settings page
        """
        if not code or not state:
            raise OAuthCallbackError("missing_params")

        workspace_id = load_oauth_state(state)
        if workspace_id is None or not self.db.get(Workspace, workspace_id):
            raise OAuthCallbackError("invalid_state")

        try:
            tokens = await self.calendar.exchange_code(code)
        except GoogleAPIError as e:
            logger.error(f"❌ Google token exchange failed for workspace {workspace_id}: {e}")
            raise OAuthCallbackError("oauth_failed") from e

        fields = {
            "label": "Google Account",
            "google_access_token": encrypt_credential(tokens["access_token"]),
            "google_token_expires_at": utcnow() + timedelta(seconds=tokens.get("expires_in", 3600)),
        }
        # Google only returns a refresh token on first consent; keep the stored one otherwise
        if tokens.get("refresh_token"):
            fields["google_refresh_token"] = encrypt_credential(tokens["refresh_token"])

        email = await self.calendar.fetch_user_email(tokens["access_token"])
        if email:
            fields["google_user_email"] = email

        integration = self.repo.upsert(self.db, workspace_id, IntegrationProvider.GOOGLE, **fields)
        logger.info(f"✅ Google connected for workspace {workspace_id} ({email or 'unknown account'})")
        return integration

    def update_google_config(self, data: GoogleConfigUpdate, user: User) -> Integration:
        integration = self.repo.get_by_provider(self.db, user.workspace_id, IntegrationProvider.GOOGLE)
        if not integration:
            raise HTTPException(status_code=404, detail="Google integration not found")

        return self.repo.upsert(
            self.db,
            user.workspace_id,
            IntegrationProvider.GOOGLE,
            google_calendar_ids=data.calendarIds,
            google_sheets_url=data.sheetsUrl,
        )

    def save_twilio_credentials(self, data: TwilioCredentials, user: User) -> Integration:
        if not data.sid or not data.authToken or not data.fromNumber:
            raise HTTPException(status_code=400, detail="Missing required fields")

        integration = self.repo.upsert(
            self.db,
            user.workspace_id,
            IntegrationProvider.TWILIO,
            label="Twilio SMS",
            twilio_account_sid=encrypt_credential(data.sid.strip()),
            twilio_auth_token=encrypt_credential(data.authToken.strip()),
            twilio_from_number=data.fromNumber,
        )
        logger.info(f"✅ Twilio credentials saved for workspace {user.workspace_id}")
        return integration
