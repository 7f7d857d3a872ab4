"""Materialize the full record set of one source by scanning its pages."""
import asyncio
import logging
from typing import Optional, Sequence

from src.config import config
from src.fetch.client import FetchClient
from src.jobs.metrics import ScanMetrics
from src.parse.models import MaterializedSet, SourceDescriptor, page_count

logger = logging.getLogger(__name__)


async def scan_all_pages(
    client: FetchClient,
    source: SourceDescriptor,
    total: int,
    page_size: int,
    concurrency: Optional[int] = None,
) -> MaterializedSet:
    """Fetch every page of ``source`` in fixed-width concurrent batches.

    Batch N+1 starts only after all of batch N resolved, so at most
    ``concurrency`` requests are in flight. Pages that fail all retries are
    recorded in ``failed_pages`` and contribute nothing.
    """
    width = max(1, concurrency or config.CONCURRENCY)
    total_pages = page_count(total, page_size)
    result = MaterializedSet(page_size=page_size)
    metrics = ScanMetrics(total_pages, label=f"{source} size={page_size}")

    for batch_start in range(1, total_pages + 1, width):
        page_numbers = list(range(batch_start, min(batch_start + width, total_pages + 1)))
        pages = await asyncio.gather(
            *(client.fetch_page_with_retry(source, number, page_size) for number in page_numbers)
        )

        for number, page in zip(page_numbers, pages):
            result.add_page(number, page)
        metrics.record_batch(result)

    if result.failed_pages:
        logger.warning(f"[scan] {source} size={page_size}: {len(result.failed_pages)} pages failed: {result.failed_pages}")
    logger.debug(f"[scan] {source} size={page_size} summary: {metrics.get_summary()}")
    return result


def fallback_sizes(first: Optional[int] = None) -> list[int]:
    """Page sizes to try, starting at ``first`` and then the smaller configured sizes."""
    if not first:
        return list(config.FALLBACK_PAGE_SIZES)
    return [first, *(size for size in config.FALLBACK_PAGE_SIZES if size < first)]


async def scan_with_fallback(
    client: FetchClient,
    source: SourceDescriptor,
    total: int,
    page_sizes: Optional[Sequence[int]] = None,
    concurrency: Optional[int] = None,
) -> MaterializedSet:
    """Scan at the first page size that yields records.

    Some servers answer with empty pages for large page sizes even though
    their total promises records, so smaller sizes are tried in turn. When
    every size comes back empty the last attempt is returned: no records
    (status ``empty``) but with its failed pages.
    """
    if total <= 0:
        return MaterializedSet()

    sizes = list(page_sizes or config.FALLBACK_PAGE_SIZES)
    attempted = 0
    result = MaterializedSet()
    for size in sizes:
        result = await scan_all_pages(client, source, total, size, concurrency=concurrency)
        result.pages_attempted += attempted
        attempted = result.pages_attempted
        if result.records:
            logger.info(f"[scan] Got {len(result)} items (pageSize={size}) from {source}")
            return result
        logger.info(f"[scan] {source} pageSize={size} returned 0 items, trying smaller size")

    # Keep the last attempt so its failed pages stay visible to the caller
    logger.warning(f"[scan] All page sizes {sizes} returned nothing for {source}, returning empty")
    return result
