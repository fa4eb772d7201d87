from celery import Celery

from app.config import settings

celery_app = Celery(
    "neopdf",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.tasks.storage"],
)
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        "purge-orphaned-objects": {
            "task": "app.tasks.storage.purge_orphaned_objects",
            "schedule": 3600.0,
        },
    },
)
