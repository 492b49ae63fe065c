from celery import Celery

from intranet.config import settings

celery_app = Celery(
    "intranet",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["intranet.tasks.events", "intranet.tasks.webhooks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_always_eager=settings.celery_task_always_eager,
    task_time_limit=300,
)
