"""
Reservation Sync Job
Run from a scheduler as a separate process: python -m relayo.sync_job
"""

import asyncio
import logging
import sys
from typing import Callable, Optional

import httpx
from sqlalchemy.orm import Session

from .database import SessionLocal
from .domain.reservations.sync import ReservationSyncService, SyncReport
from .services.google_calendar_service import GoogleCalendarService
from .services.google_sheets_service import GoogleSheetsService

logger = logging.getLogger(__name__)


async def run_sync(
    session_factory: Callable[[], Session] = SessionLocal,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SyncReport:
    db = session_factory()
    try:
        calendar = GoogleCalendarService(db, transport=transport)
        return await ReservationSyncService(db, calendar, GoogleSheetsService(calendar)).run()
    finally:
        db.close()


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.info("🚀 Starting reservation sync...")
    try:
        report = asyncio.run(run_sync())
    except KeyboardInterrupt:
        logger.info("👋 Sync stopped by user")
        return
    except Exception as e:
        logger.error(f"❌ Sync job crashed: {e}")
        sys.exit(1)

    logger.info(f"✅ Synced {report.synced} integrations ({len(report.failed)} failed)")


if __name__ == "__main__":
    main()
