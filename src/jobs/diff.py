"""Set difference between two materialized record sets and its classification."""
import logging
from typing import Any, Optional

from src.parse.kinds import RecordKind, format_for_display
from src.parse.models import ComparisonResult, MaterializedSet, ScanStatus

logger = logging.getLogger(__name__)

AMBIGUOUS_MESSAGE = (
    "Unique records do not account for the whole difference; "
    "the difference may be in ordering or unsynced data"
)
INCOMPLETE_MESSAGE = "Scan stopped before the difference was explained"


def unique_records(
    map1: dict[str, dict[str, Any]],
    map2: dict[str, dict[str, Any]],
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Records whose key is only in map1, and those only in map2."""
    only_in_1 = [record for key, record in map1.items() if key not in map2]
    only_in_2 = [record for key, record in map2.items() if key not in map1]
    return only_in_1, only_in_2


def unique_counts(map1: dict[str, Any], map2: dict[str, Any]) -> tuple[int, int]:
    """Sizes of the two one-sided key sets."""
    return (
        sum(1 for key in map1 if key not in map2),
        sum(1 for key in map2 if key not in map1),
    )


def _display(kind: RecordKind, records: list[dict[str, Any]], limit: Optional[int]) -> list[dict[str, str]]:
    if limit:
        records = records[:limit]
    return [format_for_display(kind, record) for record in records]


def _unloaded_sides(
    set1: MaterializedSet,
    set2: MaterializedSet,
    total1: int,
    total2: int,
    labels: tuple[str, str],
) -> list[str]:
    sides = []
    if total1 > 0 and set1.status is ScanStatus.EMPTY:
        sides.append(labels[0])
    if total2 > 0 and set2.status is ScanStatus.EMPTY:
        sides.append(labels[1])
    return sides


def diff(
    set1: MaterializedSet,
    set2: MaterializedSet,
    total1: int,
    total2: int,
    kind: RecordKind,
    display_limit: Optional[int] = None,
    pages_scanned: int = 0,
    complete: bool = True,
    status: str = "scanned",
    labels: tuple[str, str] = ("server 1", "server 2"),
) -> ComparisonResult:
    """Compare two record sets and explain the difference of their totals.

    In order:
    1. Equal totals are a match.
    2. A side that promised records but listed none makes the result
       incomplete, with no one-sided records.
    3. Different totals with no one-sided record are blamed on duplicate-key
       counting by the side with the larger total; its first duplicate is
       returned as ``duplicate_sample``. Incomplete scans make no such claim.
    4. Otherwise the one-sided records are the explanation. Display lists
       may be capped, the counts are not.

    A mix of missing records and duplicates is not told apart.
    """
    expected_delta = total1 - total2
    if expected_delta == 0:
        return ComparisonResult(
            total1=total1,
            total2=total2,
            difference=0,
            pages_scanned=pages_scanned,
            items_scanned=len(set1) + len(set2),
            complete=True,
            status="matched",
        )

    only_in_1, only_in_2 = unique_records(set1.records, set2.records)
    result = ComparisonResult(
        total1=total1,
        total2=total2,
        difference=expected_delta,
        only_in_1=_display(kind, only_in_1, display_limit),
        only_in_2=_display(kind, only_in_2, display_limit),
        only_in_1_count=len(only_in_1),
        only_in_2_count=len(only_in_2),
        pages_scanned=pages_scanned,
        items_scanned=len(set1) + len(set2),
        complete=complete,
        status=status,
    )

    unloaded = _unloaded_sides(set1, set2, total1, total2, labels)
    if unloaded:
        # Without one side every record of the other would look one-sided
        result.only_in_1, result.only_in_2 = [], []
        result.only_in_1_count = result.only_in_2_count = 0
        result.complete = False
        result.message = f"Items could not be loaded from {' and '.join(unloaded)}"
        logger.warning(f"[diff] {result.message}")
        return result

    if not only_in_1 and not only_in_2 and not complete:
        # Unscanned pages may still hold the missing records
        result.message = INCOMPLETE_MESSAGE
        logger.info(f"[diff] delta {expected_delta} not explained by the pages scanned")
        return result

    if not only_in_1 and not only_in_2:
        hint, source_set, label = ("left", set1, labels[0]) if expected_delta > 0 else ("right", set2, labels[1])
        result.duplicate_hint = hint
        if source_set.duplicate_sample is not None:
            result.duplicate_sample = format_for_display(kind, source_set.duplicate_sample)
            result.message = f"Every record exists on both sides; {label} counts a duplicate record"
        else:
            result.message = f"Every record exists on both sides; {label} likely counts a record twice"
        logger.info(f"[diff] delta {expected_delta} explained by duplicates on {label}")
        return result

    if len(only_in_1) - len(only_in_2) != expected_delta:
        result.message = AMBIGUOUS_MESSAGE
    logger.info(
        f"[diff] delta {expected_delta}: {len(only_in_1)} only in {labels[0]}, "
        f"{len(only_in_2)} only in {labels[1]}"
    )
    return result
