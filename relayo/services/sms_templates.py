"""SMS message templates sent to customers"""

from datetime import datetime
from typing import Optional


def _date(value: datetime) -> str:
    return value.strftime("%b %d, %Y")


def _time(value: datetime) -> str:
    return value.strftime("%I:%M %p").lstrip("0")


def _with_staff(staff: Optional[str]) -> str:
    return f" with {staff}" if staff else ""


def confirmation(name: Optional[str], service: str, start: datetime, staff: Optional[str] = None) -> str:
    return (
        f"Hi {name or 'there'}, your {service} is booked for {_date(start)} at {_time(start)}"
        f"{_with_staff(staff)}. Reply YES to confirm or CANCEL to reschedule."
    )


def cancellation(service: str, start: datetime) -> str:
    return (
        f"Your {service} appointment on {_date(start)} at {_time(start)} has been cancelled. "
        "Reply to reschedule."
    )


def reschedule(service: str, start: datetime) -> str:
    return (
        f"Your {service} appointment has been rescheduled to {_date(start)} at {_time(start)}. "
        "Reply YES to confirm."
    )
