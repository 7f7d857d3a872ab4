"""Progress of one page scan."""
import time
import logging
from typing import Dict

from src.parse.models import MaterializedSet

logger = logging.getLogger(__name__)

REPORT_EVERY_BATCHES = 10


class ScanMetrics:
    """Snapshot a scan's record set after each batch and log its progress."""

    def __init__(self, total_pages: int, label: str = ""):
        self.total_pages = total_pages
        self.label = label
        self.start_time = time.time()
        self.batches = 0
        self.pages = 0
        self.records = 0
        self.failed_pages = 0
        self.duplicates = 0

    def record_batch(self, result: MaterializedSet) -> None:
        """Take the counters of ``result`` once a batch has been merged."""
        self.batches += 1
        self.pages = result.pages_attempted
        self.records = len(result)
        self.failed_pages = len(result.failed_pages)
        self.duplicates = result.duplicate_count
        if self.batches % REPORT_EVERY_BATCHES == 0:
            self.report()

    def pages_per_second(self) -> float:
        elapsed = time.time() - self.start_time
        return self.pages / elapsed if elapsed > 0 else 0.0

    def report(self) -> None:
        """Log current progress."""
        percent = self.pages * 100 // self.total_pages if self.total_pages > 0 else 0
        logger.info(
            f"[scan] {self.label} "
            f"Pages: {self.pages}/{self.total_pages} ({percent}%) | "
            f"Records: {self.records} | "
            f"Failed pages: {self.failed_pages} | "
            f"Duplicates: {self.duplicates} | "
            f"{self.pages_per_second():.2f} pages/s"
        )

    def get_summary(self) -> Dict:
        """Get summary statistics."""
        return {
            "label": self.label,
            "total_pages": self.total_pages,
            "batches": self.batches,
            "pages": self.pages,
            "records": self.records,
            "failed_pages": self.failed_pages,
            "duplicates": self.duplicates,
            "elapsed_seconds": round(time.time() - self.start_time, 2),
        }
