"""Comparison runner orchestrating totals, scanning and the set difference."""
import asyncio
import logging
import time
import uuid
from typing import Optional

from src.config import config
from src.fetch.client import FetchClient
from src.fetch.errors import FetchError, TotalsFetchError
from src.jobs.diff import diff
from src.jobs.incremental import IncrementalComparator
from src.jobs.scanner import fallback_sizes, scan_with_fallback
from src.parse.kinds import RecordKind
from src.parse.models import ComparisonResult, ComparisonState, SourceDescriptor

logger = logging.getLogger(__name__)


class ComparisonRunner:
    """Compares one record kind between two servers."""

    def __init__(
        self,
        source1: SourceDescriptor,
        source2: SourceDescriptor,
        client: FetchClient,
        batch_size: Optional[int] = None,
        max_pages: Optional[int] = None,
        incremental: bool = False,
        concurrency: Optional[int] = None,
        display_limit: Optional[int] = None,
    ):
        if source1.kind != source2.kind:
            raise ValueError(f"Cannot compare {source1.kind.value} with {source2.kind.value}")
        self.source1 = source1
        self.source2 = source2
        self.client = client
        self.batch_size = batch_size
        self.max_pages = max_pages
        self.incremental = incremental
        self.concurrency = concurrency
        self.display_limit = display_limit if display_limit is not None else (config.DISPLAY_LIMIT or None)

        self.run_id = str(uuid.uuid4())[:8]
        self.state = ComparisonState.INIT

    @property
    def kind(self) -> RecordKind:
        return self.source1.kind

    def _transition(self, state: ComparisonState) -> None:
        logger.debug(f"[compare {self.run_id}] {self.state.value} -> {state.value}")
        self.state = state

    async def _fetch_total(self, source: SourceDescriptor) -> int:
        try:
            page = await self.client.fetch_page(source, 1, 1, timeout=config.TOTALS_TIMEOUT)
        except FetchError as e:
            logger.error(f"[compare {self.run_id}] Totals fetch failed for {source}: {e}")
            raise TotalsFetchError(source.domain, e) from e
        if page.total is None:
            raise TotalsFetchError(source.domain)
        return page.total

    async def fetch_totals(self) -> tuple[int, int]:
        """Page-1 totals of both sources, fetched concurrently."""
        results = await asyncio.gather(
            self._fetch_total(self.source1),
            self._fetch_total(self.source2),
            return_exceptions=True,
        )
        for outcome in results:
            if isinstance(outcome, BaseException):
                raise outcome
        return results[0], results[1]

    async def run(self) -> ComparisonResult:
        """Run the comparison. Raises TotalsFetchError when a total is missing."""
        start_time = time.time()
        total1, total2 = await self.fetch_totals()
        self._transition(ComparisonState.TOTALS_FETCHED)
        logger.info(
            f"[compare {self.run_id}] {self.kind.value}: {self.source1.domain}={total1} "
            f"{self.source2.domain}={total2} (delta {total1 - total2})"
        )

        if total1 == total2:
            self._transition(ComparisonState.MATCHED)
            result = ComparisonResult(
                total1=total1,
                total2=total2,
                difference=0,
                complete=True,
                status="matched",
            )
        else:
            self._transition(ComparisonState.SCANNING)
            if self.incremental:
                result = await self._run_incremental(total1, total2)
            else:
                result = await self._run_full(total1, total2)
            self._transition(
                ComparisonState.CAPPED if result.status == "capped" else ComparisonState.CONVERGED
            )

        self._transition(ComparisonState.DONE)
        logger.info(
            f"[compare {self.run_id}] Done in {time.time() - start_time:.2f}s: status={result.status} "
            f"onlyIn1={result.only_in_1_count} onlyIn2={result.only_in_2_count} "
            f"duplicateHint={result.duplicate_hint} pages={result.pages_scanned} complete={result.complete}"
        )
        return result

    async def _run_incremental(self, total1: int, total2: int) -> ComparisonResult:
        comparator = IncrementalComparator(
            self.client,
            self.source1,
            self.source2,
            page_size=self.batch_size,
            max_pages=self.max_pages,
            concurrency=self.concurrency,
            display_limit=self.display_limit,
        )
        return await comparator.run(total1, total2)

    async def _run_full(self, total1: int, total2: int) -> ComparisonResult:
        page_sizes = fallback_sizes(self.batch_size)
        set1, set2 = await asyncio.gather(
            scan_with_fallback(self.client, self.source1, total1, page_sizes=page_sizes, concurrency=self.concurrency),
            scan_with_fallback(self.client, self.source2, total2, page_sizes=page_sizes, concurrency=self.concurrency),
        )
        pages_scanned = sum(s.pages_attempted for s in (set1, set2))
        complete = not (set1.failed_pages or set2.failed_pages)
        return diff(
            set1,
            set2,
            total1,
            total2,
            self.kind,
            display_limit=self.display_limit,
            pages_scanned=pages_scanned,
            complete=complete,
            status="scanned",
            labels=(self.source1.domain, self.source2.domain),
        )


async def compare(
    source1: SourceDescriptor,
    source2: SourceDescriptor,
    kind: Optional[RecordKind] = None,
    batch_size: Optional[int] = None,
    max_pages: Optional[int] = None,
    incremental: bool = False,
    client: Optional[FetchClient] = None,
    concurrency: Optional[int] = None,
) -> ComparisonResult:
    """Compare ``kind`` records between two sources.

    ``kind`` overrides the kind of both descriptors. Without a client a new
    one is opened (with the configured transport) and closed afterwards.
    """
    if kind is not None:
        source1 = source1.model_copy(update={"kind": kind})
        source2 = source2.model_copy(update={"kind": kind})

    if client is None:
        async with FetchClient() as owned_client:
            return await compare(
                source1,
                source2,
                batch_size=batch_size,
                max_pages=max_pages,
                incremental=incremental,
                client=owned_client,
                concurrency=concurrency,
            )

    runner = ComparisonRunner(
        source1,
        source2,
        client,
        batch_size=batch_size,
        max_pages=max_pages,
        incremental=incremental,
        concurrency=concurrency,
    )
    return await runner.run()
