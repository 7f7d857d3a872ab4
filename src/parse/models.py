"""Data models for listing pages and comparison results."""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.parse.keys import normalize_key
from src.parse.kinds import KIND_SPECS, RecordKind


class SourceDescriptor(BaseModel):
    """One upstream listing endpoint: a server plus a record kind."""

    model_config = ConfigDict(frozen=True)

    domain: str
    kind: RecordKind
    data_filter: str = Field(default="", description="Opaque filter passed as the data query parameter")
    context_language: Optional[str] = None
    context_site: Optional[str] = None

    @property
    def service_path(self) -> str:
        return KIND_SPECS[self.kind].service_path

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}{self.service_path}"

    def __str__(self) -> str:
        return f"{self.domain}/{self.kind.value}"


class Page(BaseModel):
    """One fetched page of a listing."""

    total: Optional[int] = None
    records: list[dict[str, Any]] = Field(default_factory=list)
    page_number: int
    page_size: int


class ScanStatus(str, Enum):
    OK = "ok"
    PARTIAL = "partial"  # some pages failed all retries
    EMPTY = "empty"  # nothing could be listed


@dataclass
class MaterializedSet:
    """Records of one source keyed by normalized link, built page by page.

    Only the coordinating coroutine mutates it; concurrent fetches hand back
    immutable pages that are merged after their batch resolves.
    """

    records: dict[str, dict[str, Any]] = field(default_factory=dict)
    duplicate_sample: Optional[dict[str, Any]] = None
    duplicate_count: int = 0
    pages_fetched: int = 0
    pages_attempted: int = 0
    failed_pages: list[int] = field(default_factory=list)
    skipped_records: int = 0
    page_size: Optional[int] = None

    def add_page(self, page_number: int, page: Optional[Page]) -> None:
        """Merge one page's records; a None page is recorded as failed."""
        self.pages_attempted += 1
        if page is None:
            self.failed_pages.append(page_number)
            return
        self.pages_fetched += 1
        for record in page.records:
            link = record.get("link")
            if not isinstance(link, str) or not link:
                self.skipped_records += 1
                continue
            key = normalize_key(link)
            if key in self.records:
                self.duplicate_count += 1
                if self.duplicate_sample is None:
                    self.duplicate_sample = record
                continue
            self.records[key] = record

    @property
    def status(self) -> ScanStatus:
        if not self.records:
            return ScanStatus.EMPTY
        if self.failed_pages:
            return ScanStatus.PARTIAL
        return ScanStatus.OK

    def __len__(self) -> int:
        return len(self.records)


def page_count(total: int, page_size: int) -> int:
    """Number of pages needed to cover ``total`` records."""
    if total <= 0 or page_size <= 0:
        return 0
    return math.ceil(total / page_size)


class ComparisonState(str, Enum):
    INIT = "init"
    TOTALS_FETCHED = "totals_fetched"
    MATCHED = "matched"
    SCANNING = "scanning"
    CONVERGED = "converged"
    CAPPED = "capped"
    DONE = "done"


class ComparisonResult(BaseModel):
    """Outcome of comparing one record kind between two servers."""

    model_config = ConfigDict(populate_by_name=True)

    total1: int
    total2: int
    difference: int
    only_in_1: list[dict[str, Any]] = Field(default_factory=list, alias="onlyIn1")
    only_in_2: list[dict[str, Any]] = Field(default_factory=list, alias="onlyIn2")
    only_in_1_count: int = Field(default=0, alias="onlyIn1Count")
    only_in_2_count: int = Field(default=0, alias="onlyIn2Count")
    duplicate_hint: Optional[str] = Field(default=None, alias="duplicateHint")
    duplicate_sample: Optional[dict[str, Any]] = Field(default=None, alias="duplicateSample")
    pages_scanned: int = Field(default=0, alias="pagesScanned")
    items_scanned: int = Field(default=0, alias="itemsScanned")
    complete: bool = True
    status: str = "scanned"
    message: Optional[str] = None

    def to_response(self) -> dict[str, Any]:
        """JSON-ready dict with the camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


class CountResult(BaseModel):
    """Total of one service on one server, or the reason it is missing."""

    service: str
    count: Optional[int] = None
    error: Optional[str] = None


class EventItem(BaseModel):
    title: str
    link: str
    date: str = ""


class EventListing(BaseModel):
    """Parsed event feed page."""

    model_config = ConfigDict(populate_by_name=True)

    total_result: int = Field(default=0, alias="totalResult")
    events: list[EventItem] = Field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
