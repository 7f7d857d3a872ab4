"""URL and query builders for the listing services and event pages."""
from typing import Any

from src.config import config

LISTING_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Accept-Encoding": "gzip, deflate, br",
    "Accept-Language": "en-US,en;q=0.9",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Referer": "https://www.dentons.com/en/find-a-lawyer",
    "Origin": "https://www.dentons.com",
}

EVENT_PATHS = {
    "upcoming": "/en/about-dentons/news-events-and-awards/events",
    "past": "/en/about-dentons/news-events-and-awards/events/events-archive",
}


def is_allowed_domain(domain: str) -> bool:
    """Only known servers may be queried."""
    return domain in config.ALLOWED_DOMAINS


def listing_params(
    page: int,
    page_size: int,
    data_filter: str = "",
    context_language: str | None = None,
    context_site: str | None = None,
) -> dict[str, Any]:
    """Query parameters for one listing page (pageNumber is 1-based)."""
    return {
        "data": data_filter,
        "contextLanguage": context_language or config.CONTEXT_LANGUAGE,
        "contextSite": context_site or config.CONTEXT_SITE,
        "pageNumber": page,
        "pageSize": page_size,
    }


def build_people_filter(
    keywords: str = "",
    names: str = "",
    alpha: str = "",
    page: int | str = 1,
) -> str:
    """Build the colon-joined ``data`` filter of the people search."""
    parts = ["sectorid=", "practiceid=", "positionid=", "languageid=", "inpid=", "countryid="]
    if keywords:
        parts.append(f"Keywords={keywords}")
    if names:
        parts.append(f"NAMES={names}")
    if alpha:
        parts.append(f"ALPHA={alpha}")
    parts.append(f"page={page}")
    return ":".join(parts)


def event_headers(domain: str) -> dict[str, str]:
    return {
        "Accept": "text/html,application/xhtml+xml",
        "Accept-Language": "en-US,en;q=0.9",
        "User-Agent": LISTING_HEADERS["User-Agent"],
        "Referer": f"https://{domain}/en",
    }


def get_event_url(domain: str, event_type: str) -> str:
    """Events page URL; raises KeyError for an unknown feed type."""
    return f"https://{domain}{EVENT_PATHS[event_type]}"
