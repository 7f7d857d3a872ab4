"""Fetch the upcoming/past event feeds of a server."""
import logging

from src.config import config
from src.fetch.client import FetchClient
from src.fetch.endpoints import EVENT_PATHS, event_headers, get_event_url
from src.parse.events import parse_events
from src.parse.models import EventListing

logger = logging.getLogger(__name__)


async def fetch_events(client: FetchClient, domain: str, event_type: str) -> EventListing:
    """Fetch and parse one event feed. Raises FetchError on upstream failure."""
    if event_type not in EVENT_PATHS:
        raise ValueError(f"Unknown type: {event_type}. Use: {', '.join(EVENT_PATHS)}")
    url = get_event_url(domain, event_type)
    html_content = await client.fetch_text(url, headers=event_headers(domain), timeout=config.TOTALS_TIMEOUT)
    listing = parse_events(html_content, domain, event_type)
    logger.info(f"[events] {domain} {event_type}: {len(listing.events)} events, total {listing.total_result}")
    return listing
