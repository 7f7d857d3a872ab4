"""Run control: page cap and convergence for incremental scans."""
import time
import logging
from typing import Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class RunControl:
    """Controls when an incremental comparison stops scanning."""

    max_pages: int
    total_pages: int

    # Internal state
    start_time: float = field(default_factory=time.time)
    pages_scanned: int = 0
    converged_at: Optional[int] = None

    @property
    def page_bound(self) -> int:
        """Last page index that may be scanned."""
        return min(self.max_pages, self.total_pages)

    @property
    def capped(self) -> bool:
        """True when the cap, not the data, limits the scan."""
        return self.max_pages < self.total_pages

    def should_stop(self) -> tuple[bool, Optional[str]]:
        """Check if scanning should stop. Returns (should_stop, reason)."""
        if self.converged_at is not None:
            return True, f"Converged at page {self.converged_at}"
        if self.pages_scanned >= self.page_bound:
            if self.capped:
                return True, f"Reached max_pages={self.max_pages}"
            return True, f"Scanned all {self.total_pages} pages"
        return False, None

    def record_page(self) -> None:
        """Record one page index merged on both sides."""
        self.pages_scanned += 1

    def record_converged(self) -> None:
        self.converged_at = self.pages_scanned

    def get_summary(self) -> dict:
        """Get summary statistics."""
        elapsed_seconds = time.time() - self.start_time
        return {
            "elapsed_seconds": round(elapsed_seconds, 2),
            "pages_scanned": self.pages_scanned,
            "page_bound": self.page_bound,
            "converged_at": self.converged_at,
            "capped": self.capped,
        }
