"""Error types raised while fetching listings."""
from typing import Optional, Union


class CompareError(Exception):
    """Base class for comparison errors."""


class FetchError(CompareError):
    """A single page request failed (non-2xx, timeout, network or bad body)."""

    def __init__(self, status: Union[int, str], url: Optional[str] = None, message: Optional[str] = None):
        self.status = status
        self.url = url
        detail = message or (f"HTTP {status}" if isinstance(status, int) else str(status))
        super().__init__(detail)

    @property
    def is_timeout(self) -> bool:
        return self.status == "timeout"


class TotalsFetchError(CompareError):
    """Page-1 totals could not be obtained from a source."""

    def __init__(self, domain: str, cause: Optional[BaseException] = None):
        self.domain = domain
        self.cause = cause
        reason = str(cause) if cause else "missing totalResult"
        super().__init__(f"Could not fetch totals from {domain}: {reason}")
