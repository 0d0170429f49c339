"""
Celery tasks for background job processing
"""
from netatrack.tasks.celery_app import celery_app
from netatrack.tasks.news import refresh_news_cache

__all__ = [
    "celery_app",
    "refresh_news_cache",
]
