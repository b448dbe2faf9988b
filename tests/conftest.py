import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("AUTH_JWT_AUDIENCE", None)
os.environ.pop("CRON_SECRET", None)
os.environ.pop("TWILIO_WEBHOOK_SECRET", None)

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from relayo.auth import VerifiedIdentity, create_access_token, get_or_create_user  # noqa: E402
from relayo.database import Base, get_db  # noqa: E402
from relayo.main import app  # noqa: E402
from relayo.models_integration import Integration, IntegrationProvider  # noqa: E402
from relayo.providers import get_calendar_service, get_sheets_service, get_twilio_service  # noqa: E402
from relayo.security import encrypt_credential  # noqa: E402
from relayo.services.google_calendar_service import GoogleAPIError  # noqa: E402
from relayo.services.twilio_service import SentMessage, TwilioAPIError  # noqa: E402
from relayo.shared.timeutils import utcnow  # noqa: E402

SHEETS_URL = "https://docs.google.com/spreadsheets/d/sheet-123/edit#gid=0"


class FakeCalendar:
    """In-memory stand-in for GoogleCalendarService"""

    def __init__(self):
        self.events = {}  # calendar id -> list of CalendarEvent
        self.failing_integrations = set()
        self.fail_writes = False
        self.created = []
        self.updated = []
        self.deleted = []
        self.tokens = {"access_token": "ya29.token", "refresh_token": "1//refresh", "expires_in": 3600}
        self.email = "owner@gmail.com"
        self.windows = []

    async def list_events(self, integration, calendar_ids, time_min, time_max):
        self.windows.append((time_min, time_max))
        if integration.id in self.failing_integrations:
            raise GoogleAPIError("calendar unavailable", status_code=503)
        events = []
        for calendar_id in calendar_ids:
            events.extend(self.events.get(calendar_id, []))
        return events

    async def create_event(self, integration, calendar_id, body):
        if self.fail_writes:
            raise GoogleAPIError("create failed", status_code=500)
        event = {"id": f"evt-{len(self.created) + 1}", **body}
        self.created.append((calendar_id, event))
        return event

    async def update_event(self, integration, calendar_id, event_id, fields):
        if self.fail_writes:
            raise GoogleAPIError("update failed", status_code=500)
        self.updated.append((calendar_id, event_id, fields))
        return {"id": event_id, **fields}

    async def delete_event(self, integration, calendar_id, event_id):
        if self.fail_writes:
            raise GoogleAPIError("delete failed", status_code=500)
        self.deleted.append((calendar_id, event_id))

    async def exchange_code(self, code):
        if code == "bad-code":
            raise GoogleAPIError("invalid_grant", status_code=400)
        return dict(self.tokens)

    async def fetch_user_email(self, access_token):
        return self.email


class FakeSheets:
    def __init__(self):
        self.rows = {}  # (sheet url, tab, key) -> values
        self.fail = False
        self.calls = 0

    async def upsert_row_by_key(self, integration, sheet_url, tab, key, values):
        self.calls += 1
        if self.fail:
            raise GoogleAPIError("sheets down", status_code=503)
        self.rows[(sheet_url, tab, key)] = list(values)
        return 0


class FakeTwilio:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_sms(self, integration, to, body):
        if self.fail:
            raise TwilioAPIError("The 'To' number is not a valid phone number.", code=21211)
        self.sent.append((to, body))
        return SentMessage(sid=f"SM{len(self.sent):032d}", status="queued", to=to)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def fake_calendar():
    return FakeCalendar()


@pytest.fixture
def fake_sheets():
    return FakeSheets()


@pytest.fixture
def fake_twilio():
    return FakeTwilio()


@pytest.fixture
def client(db, fake_calendar, fake_sheets, fake_twilio):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_calendar_service] = lambda: fake_calendar
    app.dependency_overrides[get_sheets_service] = lambda: fake_sheets
    app.dependency_overrides[get_twilio_service] = lambda: fake_twilio
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_headers():
    def _make(subject="user-1", email="owner@example.com", name="Owner"):
        return {"Authorization": f"Bearer {create_access_token(subject, email=email, name=name)}"}

    return _make


@pytest.fixture
def user(db):
    return get_or_create_user(db, VerifiedIdentity(subject="user-1", email="owner@example.com", name="Owner"))


@pytest.fixture
def auth_headers(user, make_headers):
    return make_headers("user-1")


@pytest.fixture
def google_integration(db, user):
    integration = Integration(
        workspace_id=user.workspace_id,
        provider=IntegrationProvider.GOOGLE.value,
        label="Google Account",
        google_access_token=encrypt_credential("ya29.valid"),
        google_refresh_token=encrypt_credential("1//refresh"),
        google_token_expires_at=utcnow() + timedelta(hours=1),
        google_calendar_ids=["cal-1"],
        google_sheets_url=SHEETS_URL,
    )
    db.add(integration)
    db.commit()
    db.refresh(integration)
    return integration


@pytest.fixture
def twilio_integration(db, user):
    integration = Integration(
        workspace_id=user.workspace_id,
        provider=IntegrationProvider.TWILIO.value,
        label="Twilio SMS",
        twilio_account_sid=encrypt_credential("AC123"),
        twilio_auth_token=encrypt_credential("auth-token"),
        twilio_from_number="+15550009999",
    )
    db.add(integration)
    db.commit()
    db.refresh(integration)
    return integration


@pytest.fixture
def t0():
    return datetime(2026, 3, 10, 15, 0, 0)
