from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from uuid import UUID

from educrm.config import settings


logger = logging.getLogger("educrm.worker")


def reminder_eta(follow_up: date, *, hour: int | None = None) -> datetime:
    if hour is None:
        hour = settings.follow_up_reminder_hour
    return datetime.combine(follow_up, time(hour=hour), tzinfo=timezone.utc)


def enqueue_follow_up_reminder(*, follow_up_id: UUID, follow_up: date) -> bool:
    """Schedule the reminder task for a follow-up.

    A no-op (returning False) unless ``follow_up_reminders_enabled`` is set,
    so the API runs without a broker in dev and CI.
    """

    if not settings.follow_up_reminders_enabled:
        return False

    # Imported lazily so the HTTP app does not connect to the broker at import.
    from educrm.worker.tasks import send_follow_up_reminder

    eta = reminder_eta(follow_up)
    send_follow_up_reminder.apply_async(args=[str(follow_up_id)], eta=eta)
    logger.info("follow-up reminder enqueued follow_up_id=%s eta=%s", follow_up_id, eta.isoformat())
    return True
