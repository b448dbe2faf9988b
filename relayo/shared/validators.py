"""Shared validation utilities"""

import re
from typing import Optional

SPREADSHEET_ID_PATTERN = re.compile(r"/d/([a-zA-Z0-9-_]+)")


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to a compact E.164-like form.

    Separators (spaces, dashes, dots, parentheses) are dropped and a leading
    "+" is preserved.

    Raises:
        ValueError: If what remains is not 7 to 15 digits
    """
    if not phone:
        return phone

    phone = phone.strip()
    has_plus = phone.startswith("+")
    digits = re.sub(r"\D", "", phone)

    if not 7 <= len(digits) <= 15:
        raise ValueError("Phone number must contain 7 to 15 digits")

    return f"+{digits}" if has_plus else digits


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def extract_spreadsheet_id(sheet_url: Optional[str]) -> Optional[str]:
    """Pull the spreadsheet id out of a docs.google.com/spreadsheets/d/<id>/... URL"""
    if not sheet_url:
        return None
    match = SPREADSHEET_ID_PATTERN.search(sheet_url)
    return match.group(1) if match else None
