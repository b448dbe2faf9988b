from datetime import datetime, timedelta, timezone

import pytest

from relayo.security import decrypt_credential, encrypt_credential, load_oauth_state, sign_oauth_state
from relayo.shared.timeutils import isoformat_utc, parse_google_datetime, to_naive_utc
from relayo.shared.validators import extract_spreadsheet_id, normalize_phone, validate_email


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("+1 (555) 010-1000", "+15550101000"),
        ("555.010.1000", "5550101000"),
        (None, None),
        ("", ""),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize("raw", ["12345", "+1234567890123456", "call me"])
def test_normalize_phone_rejects_bad_numbers(raw):
    with pytest.raises(ValueError):
        normalize_phone(raw)


def test_validate_email():
    assert validate_email(" Jane@Example.COM ") == "jane@example.com"
    with pytest.raises(ValueError):
        validate_email("jane@")


def test_extract_spreadsheet_id():
    assert extract_spreadsheet_id("https://docs.google.com/spreadsheets/d/1AbC-d_9/edit#gid=0") == "1AbC-d_9"
    assert extract_spreadsheet_id("https://example.com/sheet") is None
    assert extract_spreadsheet_id(None) is None


def test_credentials_are_not_stored_in_clear():
    stored = encrypt_credential("ya29.secret")

    assert "ya29" not in stored
    assert decrypt_credential(stored) == "ya29.secret"
    assert decrypt_credential(None) is None


def test_oauth_state_carries_workspace():
    assert load_oauth_state(sign_oauth_state(42)) == 42
    assert load_oauth_state("garbage") is None


def test_oauth_state_expires():
    state = sign_oauth_state(42)

    assert load_oauth_state(state, max_age=-1) is None


def test_utc_helpers():
    aware = datetime(2026, 3, 10, 16, 0, tzinfo=timezone(timedelta(hours=1)))

    assert to_naive_utc(aware) == datetime(2026, 3, 10, 15, 0)
    assert isoformat_utc(aware) == "2026-03-10T15:00:00Z"
    assert isoformat_utc(None) == ""
    assert parse_google_datetime({"dateTime": "2026-03-10T10:00:00-05:00"}) == datetime(2026, 3, 10, 15, 0)
    assert parse_google_datetime({"date": "2026-03-10"}) == datetime(2026, 3, 10)
    assert parse_google_datetime(None) is None
