"""
Sync Routes
Trigger for the reservation sync, meant for a scheduler
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .. import config
from ..database import get_db
from ..domain.reservations.sync import ReservationSyncService
from ..providers import get_calendar_service, get_sheets_service
from ..services.google_calendar_service import GoogleCalendarService
from ..services.google_sheets_service import GoogleSheetsService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/sync", tags=["Sync"])


def require_cron_secret(x_cron_secret: Optional[str] = Header(default=None, alias="X-Cron-Secret")):
    """Open when CRON_SECRET is unset; otherwise the header must match"""
    expected = (config.CRON_SECRET or "").strip()
    if not expected:
        return
    if not hmac.compare_digest((x_cron_secret or "").strip(), expected):
        raise HTTPException(status_code=401, detail="Unauthorized: missing or invalid cron secret")


@router.post("/run", dependencies=[Depends(require_cron_secret)])
async def run_sync(
    db: Session = Depends(get_db),
    calendar: GoogleCalendarService = Depends(get_calendar_service),
    sheets: GoogleSheetsService = Depends(get_sheets_service),
):
    report = await ReservationSyncService(db, calendar, sheets).run()
    logger.info(f"🔄 Sync run finished: {report.synced} integrations, {len(report.failed)} failed")
    return {"success": True, "synced": report.synced}
