"""Celery worker and beat configuration for storage housekeeping."""

from celery import Celery

from app.core.config import settings

PURGE_INTERVAL_SECONDS = settings.purge_interval_minutes * 60

celery_app = Celery(
    "tutor_file_sharing",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.tasks.storage_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=24 * 60 * 60,
    timezone="UTC",
    enable_utc=True,
    task_default_queue="storage",
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
    worker_prefetch_multiplier=1,
)

# Rejected submissions whose blob delete failed are picked up here
celery_app.conf.beat_schedule = {
    "purge-rejected-blobs": {
        "task": "app.tasks.storage_tasks.purge_rejected_blobs_task",
        "schedule": float(PURGE_INTERVAL_SECONDS),
        "options": {"expires": PURGE_INTERVAL_SECONDS},
    },
}
