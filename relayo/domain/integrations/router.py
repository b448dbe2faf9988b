"""Integration router - provider connections and configuration"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...config import FRONTEND_URL
from ...database import get_db
from ...models import User
from ...providers import get_calendar_service
from ...services.google_calendar_service import GoogleCalendarService
from .schemas import GoogleConfigUpdate, IntegrationResponse, TwilioCredentials
from .service import IntegrationService, OAuthCallbackError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/integrations", tags=["Integrations"])

# Google redirects the browser here, outside the bearer-authenticated API
oauth_router = APIRouter(prefix="/auth/google", tags=["Integrations"])

SETTINGS_PATH = "/dashboard/settings"


def get_integration_service(
    db: Session = Depends(get_db), calendar: GoogleCalendarService = Depends(get_calendar_service)
) -> IntegrationService:
    """Dependency injection for IntegrationService"""
    return IntegrationService(db, calendar)


def _settings_redirect(**params) -> RedirectResponse:
    return RedirectResponse(url=f"{FRONTEND_URL}{SETTINGS_PATH}?{urlencode(params)}", status_code=307)


@router.get("", response_model=list[IntegrationResponse])
async def get_integrations(
    current_user: User = Depends(get_current_user),
    service: IntegrationService = Depends(get_integration_service),
):
    return [IntegrationResponse.from_model(i) for i in service.get_integrations(current_user)]


@router.get("/google/init")
async def init_google_oauth(
    current_user: User = Depends(get_current_user),
    service: IntegrationService = Depends(get_integration_service),
):
    """Consent URL for connecting Calendar + Sheets on one Google account"""
    return {"url": service.google_authorization_url(current_user)}


@oauth_router.get("/callback")
async def google_oauth_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    service: IntegrationService = Depends(get_integration_service),
):
    """Handle Google OAuth callback and bounce back to the settings page"""
    if error:
        logger.warning(f"⚠️ Google OAuth denied: {error}")
        return _settings_redirect(error="access_denied")

    try:
        await service.complete_google_oauth(code, state)
    except OAuthCallbackError as e:
        return _settings_redirect(error=e.reason)

    return _settings_redirect(google="connected")


@router.post("/google/update")
async def update_google_config(
    data: GoogleConfigUpdate,
    current_user: User = Depends(get_current_user),
    service: IntegrationService = Depends(get_integration_service),
):
    service.update_google_config(data, current_user)
    return {"success": True}


@router.post("/twilio/save")
async def save_twilio_credentials(
    data: TwilioCredentials,
    current_user: User = Depends(get_current_user),
    service: IntegrationService = Depends(get_integration_service),
):
    service.save_twilio_credentials(data, current_user)
    return {"success": True}
