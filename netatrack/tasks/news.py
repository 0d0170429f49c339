"""
News cache refresh task
"""
import asyncio
import logging
from typing import Any, Dict

from netatrack.core.monitoring import track_task
from netatrack.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def run_async(coro):
    """Helper to run async code in sync context."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@celery_app.task(bind=True, name="netatrack.tasks.news.refresh_news_cache")
@track_task("refresh_news_cache")
def refresh_news_cache(self) -> Dict[str, Any]:
    """
    Re-fetch every feed and overwrite the cached aggregate.

    Returns:
        Article count and any feed errors
    """
    logger.info("Refreshing news cache")

    async def _run():
        from netatrack.core.cache import close_redis
        from netatrack.services.news import NewsService

        # Fresh client per run; each run gets its own event loop
        service = NewsService()
        await service.startup()
        try:
            return await service.get_articles(use_cache=False)
        finally:
            await service.shutdown()
            await close_redis()

    try:
        news = run_async(_run())
    except Exception as e:
        logger.error(f"News refresh failed: {e}")
        raise self.retry(exc=e, countdown=60, max_retries=3)

    stats = {
        "articles": len(news.articles),
        "error": news.error,
        "partial_error": news.partial_error,
    }
    logger.info(f"News refresh completed: {stats}")
    return stats
