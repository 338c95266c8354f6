"""
Expiry sweeper: deletes activity posts whose scheduled time has passed.

Runs once at startup and then every EXPIRY_SWEEP_INTERVAL_SECONDS. A failed
delete is logged and the sweep moves on to the next activity.
"""

import asyncio
import logging
import os
from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo

from database import delete_document, get_documents, now_utc
from errors import StoreUnavailable
from posts import COLLECTION

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = int(os.getenv("EXPIRY_SWEEP_INTERVAL_SECONDS", "600"))
ACTIVITY_TIMEZONE = ZoneInfo(os.getenv("ACTIVITY_TIMEZONE", "UTC"))


def scheduled_at(activity: dict) -> Optional[datetime]:
    """Combine scheduled_date and scheduled_time, or None if either is missing."""
    raw_date = activity.get("scheduled_date")
    raw_time = activity.get("scheduled_time")
    if not raw_date or not raw_time:
        return None
    try:
        return datetime.combine(date.fromisoformat(raw_date), time.fromisoformat(raw_time), tzinfo=ACTIVITY_TIMEZONE)
    except (TypeError, ValueError):
        logger.warning("Activity %s has an unreadable schedule: %r %r", activity.get("_id"), raw_date, raw_time)
        return None


def sweep_once(now: Optional[datetime] = None) -> int:
    """Delete every activity scheduled before `now`. Returns the count deleted."""
    now = now or now_utc()
    deleted = 0
    for activity in get_documents(COLLECTION, {"kind": "activity"}):
        when = scheduled_at(activity)
        if when is None or when >= now:
            continue
        try:
            if delete_document(COLLECTION, activity["_id"]):
                deleted += 1
        except StoreUnavailable:
            logger.warning("Could not delete expired activity %s", activity["_id"], exc_info=True)
    if deleted:
        logger.info("Deleted %d expired activities", deleted)
    return deleted


async def run_periodically(interval: float = SWEEP_INTERVAL_SECONDS) -> None:
    while True:
        try:
            await asyncio.to_thread(sweep_once)
        except StoreUnavailable:
            logger.warning("Expiry sweep skipped, store unavailable", exc_info=True)
        except Exception:
            logger.exception("Expiry sweep failed")
        await asyncio.sleep(interval)
