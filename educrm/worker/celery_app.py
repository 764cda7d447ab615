from __future__ import annotations

from celery import Celery

from educrm.config import settings


REMINDER_QUEUE = "educrm.reminders"


def make_celery() -> Celery:
    celery = Celery(
        "educrm",
        broker=settings.redis_url,
        backend=settings.redis_url,
        include=["educrm.worker.tasks"],
    )

    # Reminders carry an ETA days ahead; late acks keep them across worker restarts.
    celery.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_default_queue=REMINDER_QUEUE,
        task_acks_late=True,
        result_expires=24 * 3600,
    )

    return celery


celery_app = make_celery()
