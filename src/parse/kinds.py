"""Record kinds served by the listing API and their per-kind field tables."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class RecordKind(str, Enum):
    """Listing services that can be compared."""

    INSIGHTS = "insights"
    PEOPLE = "people"
    NEWS = "news"


def _records_in(payload: dict[str, Any], field: str) -> list[dict[str, Any]]:
    value = payload.get(field)
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    return []


def _extract_insights(payload: dict[str, Any]) -> list[dict[str, Any]]:
    records = _records_in(payload, "tabData")
    if records:
        return records
    # Some insight servers put the records under a different key
    for value in payload.values():
        if isinstance(value, list) and value and isinstance(value[0], dict) and value[0].get("link"):
            return [item for item in value if isinstance(item, dict)]
    return []


def _extract_people(payload: dict[str, Any]) -> list[dict[str, Any]]:
    return _records_in(payload, "persons")


def _extract_news(payload: dict[str, Any]) -> list[dict[str, Any]]:
    return _records_in(payload, "NewsData")


def _display_person(record: dict[str, Any]) -> dict[str, str]:
    name = f"{record.get('firstName') or ''} {record.get('lastName') or ''}".strip()
    return {
        "name": name,
        "jobTitle": record.get("jobTitle") or "",
        "office": record.get("officeDetails") or "",
        "link": record.get("link") or "",
    }


def _display_article(record: dict[str, Any]) -> dict[str, str]:
    return {
        "heading": record.get("heading") or "",
        "date": record.get("date") or "",
        "link": record.get("link") or "",
    }


@dataclass(frozen=True)
class KindSpec:
    """Where a kind lives upstream and how its records are read."""

    service_path: str
    records_field: str
    extract: Callable[[dict[str, Any]], list[dict[str, Any]]]
    display: Callable[[dict[str, Any]], dict[str, str]]


KIND_SPECS: dict[RecordKind, KindSpec] = {
    RecordKind.INSIGHTS: KindSpec(
        service_path="/DentonsServices/DentonsInsightSearch.asmx/InsightSearchData",
        records_field="tabData",
        extract=_extract_insights,
        display=_display_article,
    ),
    RecordKind.PEOPLE: KindSpec(
        service_path="/DentonsServices/DentonsPeopleSearch.asmx/SearchResultData",
        records_field="persons",
        extract=_extract_people,
        display=_display_person,
    ),
    RecordKind.NEWS: KindSpec(
        service_path="/DentonsServices/DentonsNewsSearch.asmx/NewsSearchData",
        records_field="NewsData",
        extract=_extract_news,
        display=_display_article,
    ),
}


def parse_kind(value: str) -> RecordKind:
    """Resolve a service name; raises ValueError for unknown names."""
    try:
        return RecordKind(value.strip().lower())
    except ValueError:
        names = ", ".join(kind.value for kind in RecordKind)
        raise ValueError(f"Unknown service: {value}. Use: {names}") from None


def extract_records(kind: RecordKind, payload: dict[str, Any]) -> list[dict[str, Any]]:
    """Return the record array of a decoded listing payload."""
    return KIND_SPECS[kind].extract(payload)


def format_for_display(kind: RecordKind, record: dict[str, Any]) -> dict[str, str]:
    """Trim a record to its locator plus the fields shown for its kind."""
    return KIND_SPECS[kind].display(record)
