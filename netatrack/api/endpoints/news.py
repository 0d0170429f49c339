"""
News endpoint
"""
from fastapi import APIRouter

from netatrack.schemas import NewsResponse
from netatrack.services.news import news_service

router = APIRouter()


@router.get("", response_model=NewsResponse)
async def get_news():
    """
    Latest headlines from the configured RSS feeds, newest first.
    Feed failures are reported in error/partialError rather than as an HTTP error.
    """
    return await news_service.get_articles()
