"""
News aggregator

Pulls the latest headlines from a fixed set of Nepali English-language RSS
feeds, merges them newest-first and caches the result in Redis. A failing
feed never fails the whole request: the response carries a partial error
instead. No retries; the next cache refresh tries again.
"""
import asyncio
import logging
import uuid
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from netatrack.core.cache import cache_get, cache_set, news_key
from netatrack.core.config import settings
from netatrack.core.monitoring import track_news_fetch
from netatrack.schemas import NewsArticle, NewsResponse

logger = logging.getLogger(__name__)

MAX_ARTICLES_PER_FEED = 10
MAX_ARTICLES_TOTAL = 30
SUMMARY_LENGTH = 200

CONTENT_NS = "{http://purl.org/rss/1.0/modules/content/}"
ATOM_NS = "{http://www.w3.org/2005/Atom}"


@dataclass(frozen=True)
class NewsSource:
    name: str
    url: str


RSS_FEEDS = [
    NewsSource("Telegraph Nepal", "https://www.telegraphnepal.com/feed/"),
    NewsSource("English Ratopati", "https://english.ratopati.com/rss/"),
    NewsSource("OnlineKhabar English", "https://english.onlinekhabar.com/feed/"),
]


def strip_html(text: Optional[str]) -> str:
    if not text:
        return ""
    return BeautifulSoup(text, "html.parser").get_text(" ", strip=True)


def summarize(text: Optional[str]) -> str:
    plain = strip_html(text) or "No summary available."
    if len(plain) > SUMMARY_LENGTH:
        return plain[:SUMMARY_LENGTH].rstrip() + "..."
    return plain


def _parse_date(value: Optional[str]) -> datetime:
    if value:
        value = value.strip()
        try:
            parsed = parsedate_to_datetime(value)  # RFC 822 (RSS)
        except (TypeError, ValueError):
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))  # RFC 3339 (Atom)
            except ValueError:
                parsed = None
        if parsed is not None:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc)


def _text(element: ET.Element, tag: str) -> Optional[str]:
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def parse_feed(content: bytes, source_name: str, limit: int = MAX_ARTICLES_PER_FEED) -> List[NewsArticle]:
    """Parse an RSS 2.0 or Atom document into at most `limit` articles."""
    root = ET.fromstring(content)
    articles: List[NewsArticle] = []

    items = root.findall("./channel/item")
    if items:
        for item in items[:limit]:
            link = _text(item, "link")
            categories = [c.text.strip() for c in item.findall("category") if c.text and c.text.strip()]
            articles.append(NewsArticle(
                id=_text(item, "guid") or link or uuid.uuid4().hex,
                title=strip_html(_text(item, "title")) or "Untitled Article",
                link=link or f"urn:uuid:{uuid.uuid4()}",
                source=source_name,
                pub_date=_parse_date(_text(item, "pubDate")),
                summary=summarize(_text(item, "description") or _text(item, f"{CONTENT_NS}encoded")),
                category=categories[0] if categories else "General",
                tags=categories,
            ))
        return articles

    for entry in root.findall(f"{ATOM_NS}entry")[:limit]:
        link_el = entry.find(f"{ATOM_NS}link")
        link = link_el.get("href") if link_el is not None else None
        categories = [c.get("term") for c in entry.findall(f"{ATOM_NS}category") if c.get("term")]
        articles.append(NewsArticle(
            id=_text(entry, f"{ATOM_NS}id") or link or uuid.uuid4().hex,
            title=strip_html(_text(entry, f"{ATOM_NS}title")) or "Untitled Article",
            link=link or f"urn:uuid:{uuid.uuid4()}",
            source=source_name,
            pub_date=_parse_date(_text(entry, f"{ATOM_NS}published") or _text(entry, f"{ATOM_NS}updated")),
            summary=summarize(_text(entry, f"{ATOM_NS}summary") or _text(entry, f"{ATOM_NS}content")),
            category=categories[0] if categories else "General",
            tags=categories,
        ))
    return articles


class NewsService:
    """
    Fetches and aggregates the configured feeds.

    Maintains a shared httpx connection pool (created at startup).
    """

    def __init__(self, feeds: Optional[List[NewsSource]] = None):
        self.feeds = list(feeds) if feeds is not None else list(RSS_FEEDS)
        self._client: Optional[httpx.AsyncClient] = None

    async def startup(self):
        """Create persistent httpx pool (called from lifespan)."""
        self._client = httpx.AsyncClient(
            timeout=settings.NEWS_REQUEST_TIMEOUT,
            follow_redirects=True,
            headers={"User-Agent": f"{settings.PROJECT_NAME}/{settings.VERSION}"},
        )

    async def shutdown(self):
        """Close httpx pool on app shutdown."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            # Fallback for tests or if startup wasn't called
            self._client = httpx.AsyncClient(timeout=settings.NEWS_REQUEST_TIMEOUT, follow_redirects=True)
        return self._client

    async def fetch_feed(self, source: NewsSource) -> List[NewsArticle]:
        logger.info(f"Fetching news from {source.name} ({source.url})")
        response = await self.client.get(source.url)
        response.raise_for_status()
        articles = parse_feed(response.content, source.name)
        logger.info(f"Fetched {len(articles)} articles from {source.name}")
        return articles

    async def aggregate(self) -> NewsResponse:
        """Fetch every feed concurrently and merge the results."""
        results = await asyncio.gather(*(self.fetch_feed(s) for s in self.feeds), return_exceptions=True)

        articles: List[NewsArticle] = []
        errors: List[str] = []
        for source, result in zip(self.feeds, results):
            if isinstance(result, Exception):
                logger.error(f"Error fetching RSS feed from {source.name} ({source.url}): {result}")
                track_news_fetch(source.name, success=False)
                errors.append(f"{source.name}: {str(result)[:200]}")
                continue
            track_news_fetch(source.name, success=True)
            articles.extend(result)

        articles.sort(key=lambda a: a.pub_date, reverse=True)
        articles = articles[:MAX_ARTICLES_TOTAL]

        if errors and len(errors) == len(self.feeds):
            return NewsResponse(articles=[], error=f"Failed to fetch news from all sources. {'; '.join(errors)}")
        partial = f"Some news sources failed to load: {'; '.join(errors)}" if errors else None
        if partial and not articles:
            return NewsResponse(articles=[], error=partial)
        return NewsResponse(articles=articles, partial_error=partial)

    async def get_articles(self, use_cache: bool = True) -> NewsResponse:
        """Cached aggregate; only successful, non-empty results are cached."""
        if use_cache:
            cached = await cache_get(news_key())
            if cached is not None:
                return NewsResponse.model_validate(cached)

        news = await self.aggregate()
        if news.articles:
            await cache_set(news_key(), news.model_dump(mode="json"), ttl=settings.NEWS_CACHE_TTL)
        return news


# Global instance
news_service = NewsService()
