"""
News aggregator tests (feeds served by httpx.MockTransport)
"""
import httpx

from netatrack.services.news import (
    MAX_ARTICLES_PER_FEED,
    NewsService,
    NewsSource,
    parse_feed,
    summarize,
)

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Example News</title>
    <item>
      <title>Parliament passes budget</title>
      <link>https://news.example/budget</link>
      <guid>https://news.example/?p=1</guid>
      <pubDate>Mon, 03 Jun 2024 08:00:00 +0545</pubDate>
      <description><![CDATA[<p>The <b>federal</b> budget was passed.</p>]]></description>
      <category>Politics</category>
      <category>Economy</category>
    </item>
    <item>
      <title>Monsoon arrives early</title>
      <link>https://news.example/monsoon</link>
      <pubDate>Tue, 04 Jun 2024 08:00:00 +0545</pubDate>
      <content:encoded><![CDATA[<div>Rain across Koshi.</div>]]></content:encoded>
    </item>
  </channel>
</rss>
"""

ATOM = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom News</title>
  <entry>
    <title>Election dates announced</title>
    <link href="https://atom.example/election"/>
    <id>tag:atom.example,2024:1</id>
    <updated>2024-06-05T10:00:00Z</updated>
    <summary>The commission announced dates.</summary>
    <category term="Elections"/>
  </entry>
</feed>
"""


def test_parse_rss_items():
    articles = parse_feed(RSS, "Example")

    assert [a.title for a in articles] == ["Parliament passes budget", "Monsoon arrives early"]
    budget = articles[0]
    assert budget.id == "https://news.example/?p=1"
    assert budget.summary == "The federal budget was passed."
    assert budget.category == "Politics"
    assert budget.tags == ["Politics", "Economy"]
    assert budget.source == "Example"
    assert articles[1].summary == "Rain across Koshi."
    assert articles[1].category == "General"


def test_parse_atom_entries():
    articles = parse_feed(ATOM, "Atom")
    assert len(articles) == 1
    assert articles[0].link == "https://atom.example/election"
    assert articles[0].pub_date.year == 2024
    assert articles[0].category == "Elections"


def test_parse_feed_caps_items_per_feed():
    items = "".join(
        f"<item><title>Story {i}</title><link>https://news.example/{i}</link></item>" for i in range(25)
    )
    feed = f"<rss><channel>{items}</channel></rss>".encode()
    assert len(parse_feed(feed, "Busy")) == MAX_ARTICLES_PER_FEED


def test_summarize_truncates_long_text():
    summary = summarize("<p>" + "word " * 100 + "</p>")
    assert summary.endswith("...")
    assert len(summary) <= 203
    assert summarize(None) == "No summary available."


def _service(handler, feeds):
    service = NewsService(feeds=feeds)
    service._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return service


async def test_aggregate_merges_newest_first():
    def handler(request):
        body = RSS if request.url.host == "rss.example" else ATOM
        return httpx.Response(200, content=body)

    service = _service(handler, [
        NewsSource("RSS", "https://rss.example/feed"),
        NewsSource("Atom", "https://atom.example/feed"),
    ])
    news = await service.get_articles()
    await service.shutdown()

    assert news.error is None
    assert news.partial_error is None
    assert [a.title for a in news.articles] == [
        "Election dates announced",
        "Monsoon arrives early",
        "Parliament passes budget",
    ]


async def test_partial_failure_is_reported():
    def handler(request):
        if request.url.host == "down.example":
            return httpx.Response(503)
        return httpx.Response(200, content=RSS)

    service = _service(handler, [
        NewsSource("Up", "https://up.example/feed"),
        NewsSource("Down", "https://down.example/feed"),
    ])
    news = await service.aggregate()
    await service.shutdown()

    assert len(news.articles) == 2
    assert news.error is None
    assert "Down" in news.partial_error


async def test_all_feeds_failing_is_an_error():
    service = _service(lambda request: httpx.Response(500), [NewsSource("Down", "https://down.example/feed")])
    news = await service.aggregate()
    await service.shutdown()

    assert news.articles == []
    assert news.error.startswith("Failed to fetch news from all sources")
