"""
Google Calendar Service
Handles OAuth token refresh and calendar event listing, creation, updates, and deletion
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

import httpx
from sqlalchemy.orm import Session

from ..config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI
from ..models_integration import Integration
from ..security import decrypt_credential, encrypt_credential
from ..shared.timeutils import isoformat_utc, parse_google_datetime, utcnow

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/userinfo.email",
]

REQUEST_TIMEOUT = 10.0
TOKEN_REFRESH_MARGIN = timedelta(minutes=5)


class GoogleAPIError(Exception):
    """A Google API call failed or returned an unusable response"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class CalendarEvent:
    id: str
    summary: str
    start: Optional[datetime]
    end: Optional[datetime]
    status: str = "confirmed"
    description: Optional[str] = None
    calendar_id: Optional[str] = None
    attendees: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Dict[str, Any], calendar_id: Optional[str] = None) -> "CalendarEvent":
        return cls(
            id=payload["id"],
            summary=payload.get("summary") or "Untitled",
            start=parse_google_datetime(payload.get("start")),
            end=parse_google_datetime(payload.get("end")),
            status=payload.get("status") or "confirmed",
            description=payload.get("description"),
            calendar_id=calendar_id,
            attendees=[a["email"] for a in payload.get("attendees", []) if a.get("email")],
        )


def build_event_body(
    summary: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    description: Optional[str] = None,
    attendees: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Build an events resource body; fields left as None are omitted (PATCH friendly)"""
    body: Dict[str, Any] = {}
    if summary is not None:
        body["summary"] = summary
    if description is not None:
        body["description"] = description
    if start is not None:
        body["start"] = {"dateTime": isoformat_utc(start), "timeZone": "UTC"}
    if end is not None:
        body["end"] = {"dateTime": isoformat_utc(end), "timeZone": "UTC"}
    if attendees:
        body["attendees"] = [{"email": email} for email in attendees]
    return body


def _raise_for_google(response: httpx.Response, action: str):
    if response.status_code in (200, 201, 204):
        return
    logger.error(f"❌ Google API {action} failed ({response.status_code}): {response.text[:500]}")
    raise GoogleAPIError(f"Google API {action} failed", status_code=response.status_code)


class GoogleCalendarService:
    """Thin async client for the Calendar REST API bound to a workspace's Google integration"""

    def __init__(self, db: Session, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.db = db
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=self.transport)

    async def get_valid_access_token(self, integration: Integration) -> str:
        """
        Get a valid access token, refreshing if necessary.

        The token is refreshed when missing or within five minutes of expiry; the
        new encrypted token is persisted on the integration.
        """
        expires_at = integration.google_token_expires_at
        if integration.google_access_token and expires_at and expires_at > utcnow() + TOKEN_REFRESH_MARGIN:
            return decrypt_credential(integration.google_access_token)

        if not integration.google_refresh_token:
            raise GoogleAPIError("Google integration has no refresh token")

        logger.info(f"🔄 Google token expired for integration {integration.id}, refreshing...")
        refresh_token = decrypt_credential(integration.google_refresh_token)

        try:
            async with self._client() as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "client_id": GOOGLE_CLIENT_ID,
                        "client_secret": GOOGLE_CLIENT_SECRET,
                        "refresh_token": refresh_token,
                        "grant_type": "refresh_token",
                    },
                )
        except httpx.HTTPError as e:
            raise GoogleAPIError(f"Token refresh request failed: {e}") from e

        _raise_for_google(response, "token refresh")

        tokens = response.json()
        access_token = tokens.get("access_token")
        if not access_token:
            logger.error("❌ No access token in refresh response")
            raise GoogleAPIError("No access token in refresh response")

        integration.google_access_token = encrypt_credential(access_token)
        integration.google_token_expires_at = utcnow() + timedelta(seconds=tokens.get("expires_in", 3600))
        self.db.commit()

        logger.info(f"✅ Google token refreshed for integration {integration.id}")
        return access_token

    async def request(self, integration: Integration, method: str, url: str, action: str, **kwargs) -> httpx.Response:
        """Send an authorized request; non-2xx answers raise GoogleAPIError"""
        access_token = await self.get_valid_access_token(integration)
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {access_token}"

        try:
            async with self._client() as client:
                response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"❌ Google API {action} request error: {e}")
            raise GoogleAPIError(f"Google API {action} request error") from e

        _raise_for_google(response, action)
        return response

    async def _list_calendar_events(
        self, integration: Integration, calendar_id: str, time_min: datetime, time_max: datetime
    ) -> List[CalendarEvent]:
        events: List[CalendarEvent] = []
        params = {
            "timeMin": isoformat_utc(time_min),
            "timeMax": isoformat_utc(time_max),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": "250",
            # Cancelled events are only listed with showDeleted
            "showDeleted": "true",
        }
        url = f"{GOOGLE_CALENDAR_API}/calendars/{quote(calendar_id, safe='')}/events"

        while True:
            response = await self.request(integration, "GET", url, "list events", params=params)
            payload = response.json()
            for item in payload.get("items", []):
                if item.get("id"):
                    events.append(CalendarEvent.from_api(item, calendar_id))

            page_token = payload.get("nextPageToken")
            if not page_token:
                return events
            params = {**params, "pageToken": page_token}

    async def list_events(
        self, integration: Integration, calendar_ids: List[str], time_min: datetime, time_max: datetime
    ) -> List[CalendarEvent]:
        """
        List single events across calendars within [time_min, time_max].

        A calendar that fails to list is logged and skipped so the remaining
        calendars still contribute their events. Credential failures are not
        per calendar and propagate to the caller.
        """
        await self.get_valid_access_token(integration)

        events: List[CalendarEvent] = []
        for calendar_id in calendar_ids:
            try:
                events.extend(await self._list_calendar_events(integration, calendar_id, time_min, time_max))
            except GoogleAPIError as e:
                logger.error(f"❌ Error fetching events from calendar {calendar_id}: {e}")
        return events

    async def create_event(self, integration: Integration, calendar_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{GOOGLE_CALENDAR_API}/calendars/{quote(calendar_id, safe='')}/events"
        response = await self.request(integration, "POST", url, "create event", json=body)
        event = response.json()
        logger.info(f"✅ Google Calendar event created: {event.get('id')}")
        return event

    async def update_event(
        self, integration: Integration, calendar_id: str, event_id: str, fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Patch only the given fields of an event"""
        url = f"{GOOGLE_CALENDAR_API}/calendars/{quote(calendar_id, safe='')}/events/{quote(event_id, safe='')}"
        response = await self.request(integration, "PATCH", url, "update event", json=fields)
        logger.info(f"✅ Google Calendar event updated: {event_id}")
        return response.json()

    async def delete_event(self, integration: Integration, calendar_id: str, event_id: str):
        url = f"{GOOGLE_CALENDAR_API}/calendars/{quote(calendar_id, safe='')}/events/{quote(event_id, safe='')}"
        try:
            await self.request(integration, "DELETE", url, "delete event")
        except GoogleAPIError as e:
            # Already gone on the remote side
            if e.status_code in (404, 410):
                logger.info(f"ℹ️ Event {event_id} already deleted from Google Calendar")
                return
            raise
        logger.info(f"✅ Google Calendar event deleted: {event_id}")

    @staticmethod
    def build_authorization_url(state: str) -> str:
        params = {
            "client_id": GOOGLE_CLIENT_ID or "",
            "redirect_uri": GOOGLE_REDIRECT_URI,
            "response_type": "code",
            "scope": " ".join(GOOGLE_SCOPES),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        """Exchange an authorization code for access/refresh tokens"""
        try:
            async with self._client() as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": GOOGLE_CLIENT_ID,
                        "client_secret": GOOGLE_CLIENT_SECRET,
                        "redirect_uri": GOOGLE_REDIRECT_URI,
                        "grant_type": "authorization_code",
                    },
                )
        except httpx.HTTPError as e:
            raise GoogleAPIError(f"Token exchange request failed: {e}") from e

        _raise_for_google(response, "token exchange")
        tokens = response.json()
        if not tokens.get("access_token"):
            raise GoogleAPIError("Invalid token response")
        return tokens

    async def fetch_user_email(self, access_token: str) -> Optional[str]:
        try:
            async with self._client() as client:
                response = await client.get(
                    GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
                )
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Failed to fetch Google user info: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"⚠️ Failed to get user info: {response.text[:200]}")
            return None
        return response.json().get("email")
