"""Celery application configuration."""

from celery import Celery

from storefront.core.config import settings

celery_app = Celery(
    "storefront",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "storefront.workers.bulk_tasks",
        "storefront.workers.maintenance_tasks",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=3600,  # 1 hour
    worker_prefetch_multiplier=1,
)

# Schedule periodic tasks
celery_app.conf.beat_schedule = {
    "purge-expired-preview-tokens": {
        "task": "storefront.workers.maintenance_tasks.purge_expired_preview_tokens",
        "schedule": 3600.0,  # Every hour
    },
    "expire-stale-carts-daily": {
        "task": "storefront.workers.maintenance_tasks.expire_stale_carts",
        "schedule": 86400.0,
    },
}
