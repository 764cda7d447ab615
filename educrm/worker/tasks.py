from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from educrm.crud.application import mark_follow_up_reminded
from educrm.database import SessionLocal
from educrm.worker.celery_app import celery_app


logger = logging.getLogger("educrm.worker")


async def _mark_reminded(follow_up_id: UUID) -> bool:
    async with SessionLocal() as session:
        entry = await mark_follow_up_reminded(session, follow_up_id=follow_up_id)
        return entry is not None


@celery_app.task(name="educrm.send_follow_up_reminder")
def send_follow_up_reminder(follow_up_id: str) -> bool:
    """Stamp ``reminded_at`` on a follow-up whose date has arrived.

    Returns False when the follow-up no longer exists (its application was
    deleted in the meantime).
    """

    found = asyncio.run(_mark_reminded(UUID(follow_up_id)))
    if found:
        logger.info("follow-up reminder sent follow_up_id=%s", follow_up_id)
    else:
        logger.info("follow-up reminder skipped, follow-up gone follow_up_id=%s", follow_up_id)
    return found
