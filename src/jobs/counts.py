"""Per-service totals of one server."""
import logging

from src.config import config
from src.fetch.client import FetchClient
from src.fetch.errors import FetchError
from src.parse.kinds import RecordKind
from src.parse.models import CountResult, SourceDescriptor

logger = logging.getLogger(__name__)


async def fetch_count(client: FetchClient, domain: str, kind: RecordKind) -> CountResult:
    """Total of one service; failures are reported in ``error``, not raised."""
    source = SourceDescriptor(domain=domain, kind=kind)
    try:
        page = await client.fetch_page(source, 1, 1, timeout=config.TOTALS_TIMEOUT)
    except FetchError as e:
        logger.warning(f"[counts] {source}: {e}")
        return CountResult(service=kind.value, error="Timeout" if e.is_timeout else str(e))
    return CountResult(service=kind.value, count=page.total or 0)


async def fetch_counts(client: FetchClient, domain: str) -> dict[str, CountResult]:
    """Totals of every service on ``domain``.

    Services are queried one after the other and stored under their own key.
    """
    results: dict[str, CountResult] = {}
    for kind in RecordKind:
        results[kind.value] = await fetch_count(client, domain, kind)
    return results
