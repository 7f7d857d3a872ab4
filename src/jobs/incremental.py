"""Incremental comparison that stops as soon as the difference is explained."""
import asyncio
import logging
from typing import Optional

from src.config import config
from src.fetch.client import FetchClient
from src.jobs.diff import diff, unique_counts
from src.jobs.run_control import RunControl
from src.parse.models import ComparisonResult, MaterializedSet, SourceDescriptor, page_count

logger = logging.getLogger(__name__)


def clamp_batch_size(batch_size: Optional[int]) -> int:
    """Page size for incremental scans, bounded by MAX_BATCH_SIZE."""
    size = batch_size or config.DEFAULT_BATCH_SIZE
    return max(1, min(size, config.MAX_BATCH_SIZE))


def clamp_max_pages(max_pages: Optional[int]) -> int:
    """Page cap for incremental scans, bounded by MAX_PAGES_CAP."""
    pages = max_pages or config.DEFAULT_MAX_PAGES
    return max(1, min(pages, config.MAX_PAGES_CAP))


class IncrementalComparator:
    """Scan both sources page index by page index and stop once explained.

    Windows of up to ``concurrency`` page indexes are fetched from both
    sources at once. Pages are then merged in index order, and after each
    index the one-sided counts are checked against the expected delta.
    """

    def __init__(
        self,
        client: FetchClient,
        source1: SourceDescriptor,
        source2: SourceDescriptor,
        page_size: Optional[int] = None,
        max_pages: Optional[int] = None,
        concurrency: Optional[int] = None,
        display_limit: Optional[int] = None,
    ):
        self.client = client
        self.source1 = source1
        self.source2 = source2
        self.page_size = clamp_batch_size(page_size)
        self.max_pages = clamp_max_pages(max_pages)
        self.concurrency = max(1, concurrency or config.CONCURRENCY)
        self.display_limit = display_limit
        self.set1 = MaterializedSet(page_size=self.page_size)
        self.set2 = MaterializedSet(page_size=self.page_size)

    @staticmethod
    def is_explained(set1: MaterializedSet, set2: MaterializedSet, expected_delta: int) -> bool:
        only_1, only_2 = unique_counts(set1.records, set2.records)
        return only_1 - only_2 == expected_delta and only_1 + only_2 > 0

    async def _fetch_window(self, page_numbers: list[int]):
        requests = []
        for number in page_numbers:
            requests.append(self.client.fetch_page_with_retry(self.source1, number, self.page_size))
            requests.append(self.client.fetch_page_with_retry(self.source2, number, self.page_size))
        results = await asyncio.gather(*requests)
        return [(number, results[2 * i], results[2 * i + 1]) for i, number in enumerate(page_numbers)]

    async def run(self, total1: int, total2: int) -> ComparisonResult:
        expected_delta = total1 - total2
        kind = self.source1.kind
        labels = (self.source1.domain, self.source2.domain)
        if expected_delta == 0:
            return diff(self.set1, self.set2, total1, total2, kind, labels=labels)

        control = RunControl(
            max_pages=self.max_pages,
            total_pages=page_count(max(total1, total2), self.page_size),
        )
        logger.info(
            f"[incremental] {self.source1} vs {self.source2}: delta {expected_delta}, "
            f"pageSize={self.page_size}, scanning up to {control.page_bound} pages"
        )

        next_page = 1
        should_stop, reason = control.should_stop()
        while not should_stop:
            window = list(range(next_page, min(next_page + self.concurrency, control.page_bound + 1)))
            for number, page1, page2 in await self._fetch_window(window):
                self.set1.add_page(number, page1)
                self.set2.add_page(number, page2)
                control.record_page()
                if self.is_explained(self.set1, self.set2, expected_delta):
                    control.record_converged()
                    break
            next_page += len(window)
            should_stop, reason = control.should_stop()

        logger.info(f"[incremental] Stopped: {reason} ({control.get_summary()})")

        failed = bool(self.set1.failed_pages or self.set2.failed_pages)
        if control.converged_at is not None:
            status, complete = "converged", True
        elif control.capped:
            status, complete = "capped", False
        else:
            status, complete = "scanned", not failed

        return diff(
            self.set1,
            self.set2,
            total1,
            total2,
            kind,
            display_limit=self.display_limit,
            pages_scanned=control.pages_scanned,
            complete=complete,
            status=status,
            labels=labels,
        )
