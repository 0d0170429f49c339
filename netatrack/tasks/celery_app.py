"""
Celery application configuration
"""
from celery import Celery
from celery.schedules import crontab

from netatrack.core.config import settings

celery_app = Celery(
    "netatrack",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "netatrack.tasks.news",
    ]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    timezone="Asia/Kathmandu",
    enable_utc=True,

    task_track_started=True,
    task_time_limit=5 * 60,

    result_expires=3600,

    worker_prefetch_multiplier=1,
    worker_concurrency=2,
)

# Periodic task schedule (Celery Beat)
celery_app.conf.beat_schedule = {
    # Keep the news cache warm so /api/news rarely hits the feeds inline
    "refresh-news-every-30-min": {
        "task": "netatrack.tasks.news.refresh_news_cache",
        "schedule": crontab(minute="*/30"),
    },
}
