"""Tests for the parallel page scanner and page-size fallback."""
import asyncio

from src.jobs.metrics import ScanMetrics
from src.jobs.scanner import fallback_sizes, scan_all_pages, scan_with_fallback
from src.parse.kinds import RecordKind
from src.parse.models import MaterializedSet, Page, ScanStatus, SourceDescriptor

from tests.fakes import LEFT, make_records

SOURCE = SourceDescriptor(domain=LEFT, kind=RecordKind.INSIGHTS)


def test_scan_all_pages_collects_every_record(upstream):
    """All pages are fetched in batches no wider than the concurrency."""
    upstream.add_listing(LEFT, make_records(LEFT, range(95)))

    async def run():
        async with upstream.client() as client:
            return await scan_all_pages(client, SOURCE, 95, 10, concurrency=3)

    result = asyncio.run(run())
    assert len(result) == 95
    assert result.pages_fetched == 10
    assert result.status is ScanStatus.OK
    assert sorted(r[2] for r in upstream.requests) == list(range(1, 11))


def test_scan_partial_failure(upstream):
    """A page failing every retry is skipped; the other pages still count."""
    upstream.add_listing(LEFT, make_records(LEFT, range(50)))
    upstream.fail_page(LEFT, 3)

    async def run():
        async with upstream.client() as client:
            return await scan_all_pages(client, SOURCE, 50, 10)

    result = asyncio.run(run())
    assert len(result) == 40
    assert result.pages_fetched == 4
    assert result.failed_pages == [3]
    assert result.status is ScanStatus.PARTIAL
    assert "/en/insights/item-25" not in result.records


def test_scan_keeps_first_duplicate(upstream):
    """A repeated link is kept once and sampled as a duplicate."""
    records = make_records(LEFT, range(10)) + [dict(make_records(LEFT, [4])[0], heading="Second copy")]
    upstream.add_listing(LEFT, records)

    async def run():
        async with upstream.client() as client:
            return await scan_all_pages(client, SOURCE, 11, 5)

    result = asyncio.run(run())
    assert len(result) == 10
    assert result.duplicate_count == 1
    assert result.duplicate_sample["heading"] == "Second copy"
    assert result.records["/en/insights/item-4"]["heading"] == "Item 4"


def test_scan_skips_records_without_link(upstream):
    """Records with no usable link are not keyed."""
    records = make_records(LEFT, range(4)) + [{"heading": "No link"}, {"link": None, "heading": "Null link"}]
    upstream.add_listing(LEFT, records)

    async def run():
        async with upstream.client() as client:
            return await scan_all_pages(client, SOURCE, 6, 10)

    result = asyncio.run(run())
    assert len(result) == 4
    assert result.skipped_records == 2


def test_fallback_to_smaller_page_size(upstream):
    """Sizes that return empty pages are abandoned for smaller ones."""
    upstream.add_listing(LEFT, make_records(LEFT, range(45)))
    upstream.empty_page_sizes[LEFT] = {100, 50}

    async def run():
        async with upstream.client() as client:
            degraded = await scan_with_fallback(client, SOURCE, 45)
            direct = await scan_all_pages(client, SOURCE, 45, 20)
            return degraded, direct

    degraded, direct = asyncio.run(run())
    assert degraded.page_size == 20
    assert degraded.records == direct.records
    assert len(degraded) == 45


def test_fallback_all_sizes_empty(upstream):
    """When no size yields records the set is empty."""
    upstream.add_listing(LEFT, make_records(LEFT, range(5)))
    upstream.empty_page_sizes[LEFT] = {100, 50, 20}

    async def run():
        async with upstream.client() as client:
            return await scan_with_fallback(client, SOURCE, 5)

    result = asyncio.run(run())
    assert len(result) == 0
    assert result.status is ScanStatus.EMPTY


def test_fallback_zero_total_fetches_nothing(upstream):
    """A zero total needs no page requests."""

    async def run():
        async with upstream.client() as client:
            return await scan_with_fallback(client, SOURCE, 0)

    result = asyncio.run(run())
    assert len(result) == 0
    assert upstream.requests == []


def test_scan_survives_broken_content_encoding(upstream):
    """A page whose body cannot be inflated fails alone; the scan goes on."""
    upstream.add_listing(LEFT, make_records(LEFT, range(50)))
    upstream.broken_encoding.add((LEFT, 3))

    async def run():
        async with upstream.client() as client:
            return await scan_all_pages(client, SOURCE, 50, 10)

    result = asyncio.run(run())
    assert len(result) == 40
    assert result.failed_pages == [3]


def test_fallback_keeps_failed_pages(upstream):
    """When every size fails the empty result still names its failed pages."""
    upstream.add_listing(LEFT, make_records(LEFT, range(30)))
    upstream.failing_page_sizes[LEFT] = {100, 50, 20}

    async def run():
        async with upstream.client() as client:
            return await scan_with_fallback(client, SOURCE, 30)

    result = asyncio.run(run())
    assert result.status is ScanStatus.EMPTY
    assert result.page_size == 20
    assert result.failed_pages == [1, 2]
    assert result.pages_attempted == 4


def test_fallback_sizes():
    """An explicit size is tried first, then the smaller configured sizes."""
    assert fallback_sizes(None) == [100, 50, 20]
    assert fallback_sizes(75) == [75, 50, 20]
    assert fallback_sizes(20) == [20]
    assert fallback_sizes(10) == [10]


def test_scan_metrics_snapshot():
    """Scan metrics read their counters from the merged record set."""
    result = MaterializedSet()
    result.add_page(1, Page(records=make_records(LEFT, range(3)), page_number=1, page_size=3))
    result.add_page(2, None)
    metrics = ScanMetrics(total_pages=4, label="left")
    metrics.record_batch(result)

    summary = metrics.get_summary()
    assert summary["batches"] == 1
    assert summary["pages"] == 2
    assert summary["records"] == 3
    assert summary["failed_pages"] == 1
