"""Tests for event feed parsing."""
import asyncio

import httpx
from src.fetch.client import FetchClient
from src.fetch.events import fetch_events
from src.fetch.transport import DirectTransport
from src.parse.events import parse_events

DOMAIN = "www.dentons.com"

EVENTS_HTML = """
<html><body>
<div class="results">Total Results (27)</div>
<section>
  <h2>Upcoming Events</h2>
  <div class="event">
    <h4><a href="/en/about-dentons/news-events-and-awards/events/2025/march/annual-tax-forum">Annual Tax Forum</a></h4>
    <p>March 12, 2025. Toronto office, 9:00 am.</p>
  </div>
  <div class="event">
    <h4 class="title"><a href="https://www.dentons.com/en/about-dentons/news-events-and-awards/events/2025/april/esg-briefing">ESG Briefing</a></h4>
    <p>Webinar on April 3-4, 2025 for clients.</p>
  </div>
  <div class="event">
    <h4><a href="/en/insights/articles/2025/not-an-event">Not an event</a></h4>
  </div>
  <div class="event">
    <h4>No link here</h4>
  </div>
</section>
<div id="EventiCalendar"></div>
<h4><a href="/en/about-dentons/news-events-and-awards/events/outside">Outside the list</a></h4>
</body></html>
"""


def test_parse_events_total_and_entries():
    """Entries are read from the requested section only."""
    listing = parse_events(EVENTS_HTML, DOMAIN, "upcoming")

    assert listing.total_result == 27
    assert [e.title for e in listing.events] == ["Annual Tax Forum", "ESG Briefing"]
    first, second = listing.events
    assert first.link == "https://www.dentons.com/en/about-dentons/news-events-and-awards/events/2025/march/annual-tax-forum"
    assert first.date == "March 12, 2025"
    assert second.link.startswith("https://www.dentons.com/")
    assert second.date == "April 3-4, 2025"


def test_parse_events_missing_section():
    """A page without the requested section has no entries."""
    listing = parse_events(EVENTS_HTML, DOMAIN, "past")
    assert listing.total_result == 27
    assert listing.events == []


def test_parse_events_empty_page():
    """An empty body gives an empty listing."""
    listing = parse_events("", DOMAIN, "upcoming")
    assert listing.total_result == 0
    assert listing.events == []


def test_fetch_events_requests_feed_url():
    """The past feed is read from the events archive page."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text=EVENTS_HTML.replace("Upcoming Events", "Past Events"))

    async def run():
        client = FetchClient(
            transport=DirectTransport(),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        async with client:
            return await fetch_events(client, DOMAIN, "past")

    listing = asyncio.run(run())
    assert seen == ["https://www.dentons.com/en/about-dentons/news-events-and-awards/events/events-archive"]
    assert len(listing.events) == 2
    assert listing.to_response()["totalResult"] == 27
