"""Extract event listings from the events HTML pages."""
import logging
import re

from selectolax.parser import HTMLParser

from src.parse.models import EventItem, EventListing

logger = logging.getLogger(__name__)

TOTAL_PATTERN = re.compile(r"Total Results \((\d+)\)")
DATE_PATTERN = re.compile(
    r"((?:January|February|March|April|May|June|July|August|September|October|November|December)"
    r"\s+\d{1,2}(?:[-–]\d{1,2})?,?\s*\d{4})"
)
SECTION_MARKERS = {
    "upcoming": "Upcoming Events",
    "past": "Past Events",
}


def _section(html_content: str, event_type: str) -> str:
    """Slice of the page holding the requested event list."""
    marker = re.escape(SECTION_MARKERS.get(event_type, SECTION_MARKERS["upcoming"]))
    match = re.search(f"{marker}([\\s\\S]*?)EventiCalendar", html_content, re.IGNORECASE)
    if not match:
        match = re.search(f"{marker}([\\s\\S]*?)$", html_content, re.IGNORECASE)
    return match.group(1) if match else ""


def _text(fragment: str) -> str:
    if not fragment.strip():
        return ""
    return HTMLParser(fragment).text(separator=" ")


def _event_date(after_heading: str) -> str:
    text = re.sub(r"\s+", " ", _text(after_heading)).strip()
    first_sentence = re.split(r"\.\s", text)[0][:100].strip()
    match = DATE_PATTERN.search(first_sentence)
    return match.group(1) if match else ""


def parse_events(html_content: str, domain: str, event_type: str) -> EventListing:
    """Parse the total and the event entries of an events page."""
    if not html_content:
        return EventListing()

    total_match = TOTAL_PATTERN.search(html_content)
    total = int(total_match.group(1)) if total_match else 0

    events: list[EventItem] = []
    blocks = re.split(r"<h4[\s>]", _section(html_content, event_type))[1:]
    for block in blocks:
        parser = HTMLParser(f"<h4>{block}")
        anchor = parser.css_first("a[href]")
        if anchor is None:
            continue
        raw_link = anchor.attributes.get("href") or ""
        title = anchor.text(strip=True)
        if not title or "/events/" not in raw_link:
            continue
        link = raw_link if raw_link.startswith("http") else f"https://{domain}{raw_link}"
        after_heading = block.split("</h4>", 1)[1] if "</h4>" in block else ""
        events.append(EventItem(title=title, link=link, date=_event_date(after_heading)))

    logger.debug(f"Parsed {len(events)} {event_type} events (total {total}) from {domain}")
    return EventListing(total_result=total, events=events)
