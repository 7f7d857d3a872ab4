"""FastAPI main application."""
import logging
from datetime import datetime
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from src.config import config, Config
from src.fetch.client import FetchClient, direct_client
from src.fetch.endpoints import EVENT_PATHS, build_people_filter, is_allowed_domain
from src.fetch.errors import FetchError, TotalsFetchError
from src.fetch.events import fetch_events
from src.jobs.counts import fetch_counts
from src.jobs.runner import compare
from src.logging_conf import setup_logging
from src.parse.kinds import RecordKind, parse_kind
from src.parse.models import SourceDescriptor

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate"}

app = FastAPI(title="Server Compare API", version="0.1.0")


async def get_client() -> AsyncIterator[FetchClient]:
    """Client using the configured transport (direct or proxy)."""
    async with FetchClient() as client:
        yield client


async def get_direct_client() -> AsyncIterator[FetchClient]:
    """Client that always talks to the upstream servers."""
    async with direct_client() as client:
        yield client


def _require_domain(domain: str) -> None:
    if not is_allowed_domain(domain):
        raise HTTPException(status_code=400, detail=f"Domain not allowed: {domain}")


def _require_kind(service: str) -> RecordKind:
    try:
        return parse_kind(service)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _failure(error: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": error, "message": message}, status_code=status_code, headers=NO_CACHE_HEADERS)


async def _run_compare(
    client: FetchClient,
    domain1: str,
    domain2: str,
    service: str,
    incremental: bool,
    batch_size: Optional[int] = None,
    max_pages: Optional[int] = None,
) -> JSONResponse:
    _require_domain(domain1)
    _require_domain(domain2)
    kind = _require_kind(service)

    try:
        result = await compare(
            SourceDescriptor(domain=domain1, kind=kind),
            SourceDescriptor(domain=domain2, kind=kind),
            batch_size=batch_size,
            max_pages=max_pages,
            incremental=incremental,
            client=client,
        )
    except TotalsFetchError as e:
        logger.error(f"Compare {service} failed: {e}")
        return _failure("Comparison failed", str(e), 502)
    return JSONResponse(result.to_response(), headers=NO_CACHE_HEADERS)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "transport": "proxy" if config.PROXY_URL else "direct",
    }


@app.get("/api/server-compare")
async def server_compare(
    domain1: str = "",
    domain2: str = "",
    service: str = "",
    client: FetchClient = Depends(get_client),
):
    """Full scan of both servers, then one set difference."""
    return await _run_compare(client, domain1, domain2, service, incremental=False)


@app.get("/api/{service}/compare")
async def incremental_compare(
    service: str,
    domain1: str = Query(default=config.DEFAULT_LEFT_DOMAIN),
    domain2: str = Query(default=config.DEFAULT_RIGHT_DOMAIN),
    batch_size: Optional[int] = Query(default=None, alias="batchSize", ge=1),
    max_pages: Optional[int] = Query(default=None, alias="maxPages", ge=1),
    client: FetchClient = Depends(get_client),
):
    """Scan both servers page by page and stop once the delta is explained."""
    return await _run_compare(
        client,
        domain1,
        domain2,
        service,
        incremental=True,
        batch_size=batch_size,
        max_pages=max_pages,
    )


@app.get("/api/batch-counts")
async def batch_counts(domain: str = "", client: FetchClient = Depends(get_client)):
    """Totals of every listing service on one server."""
    _require_domain(domain)
    counts = await fetch_counts(client, domain)
    payload = {"domain": domain}
    for service, result in counts.items():
        payload[service] = {"count": result.count, "error": result.error}
    return JSONResponse(payload, headers=NO_CACHE_HEADERS)


@app.get("/api/server-proxy")
async def server_proxy(
    domain: str = "",
    service: str = "",
    data: str = "",
    page_number: int = Query(default=1, alias="pageNumber", ge=1),
    page_size: int = Query(default=10, alias="pageSize", ge=1),
    context_language: Optional[str] = Query(default=None, alias="contextLanguage"),
    context_site: Optional[str] = Query(default=None, alias="contextSite"),
    client: FetchClient = Depends(get_direct_client),
):
    """One decoded listing page, fetched directly from the upstream server."""
    _require_domain(domain)
    kind = _require_kind(service)
    source = SourceDescriptor(
        domain=domain,
        kind=kind,
        data_filter=data,
        context_language=context_language or None,
        context_site=context_site or None,
    )
    try:
        payload = await client.fetch_payload(source, page_number, page_size, timeout=config.TOTALS_TIMEOUT)
    except FetchError as e:
        logger.warning(f"server-proxy {source} page {page_number}: {e}")
        if e.is_timeout:
            return _failure("Failed to fetch", f"Timeout after {config.TOTALS_TIMEOUT:g}s", 504)
        return _failure("Failed to fetch", str(e), 500)
    return JSONResponse(payload, headers=NO_CACHE_HEADERS)


@app.get("/api/people")
async def people_search(
    keywords: str = "",
    names: str = "",
    alpha: str = "",
    page_number: int = Query(default=1, alias="pageNumber", ge=1),
    page_size: int = Query(default=20, alias="pageSize", ge=1),
    client: FetchClient = Depends(get_client),
):
    """People search on the main server."""
    data_filter = ""
    if keywords or names or alpha:
        data_filter = build_people_filter(keywords=keywords, names=names, alpha=alpha, page=page_number)
    source = SourceDescriptor(domain=config.MAIN_DOMAIN, kind=RecordKind.PEOPLE, data_filter=data_filter)
    try:
        payload = await client.fetch_payload(source, page_number, page_size)
    except FetchError as e:
        logger.error(f"People search failed: {e}")
        return _failure("Failed to fetch people", str(e), 502)
    return JSONResponse(payload, headers=NO_CACHE_HEADERS)


@app.get("/api/events")
async def events(
    domain: str = Query(default=config.MAIN_DOMAIN),
    event_type: str = Query(default="upcoming", alias="type"),
    client: FetchClient = Depends(get_direct_client),
):
    """Upcoming or past events of a server."""
    _require_domain(domain)
    if event_type not in EVENT_PATHS:
        raise HTTPException(status_code=400, detail=f"Unknown type: {event_type}. Use: {', '.join(EVENT_PATHS)}")
    try:
        listing = await fetch_events(client, domain, event_type)
    except FetchError as e:
        logger.warning(f"Events {domain} {event_type}: {e}")
        if e.is_timeout:
            return _failure("Failed to fetch events", f"Timeout after {config.TOTALS_TIMEOUT:g}s", 504)
        return _failure("Failed to fetch events", str(e), 500)
    return listing.to_response()


if __name__ == "__main__":
    import uvicorn
    setup_logging()
    Config.validate()
    uvicorn.run(app, host="0.0.0.0", port=8000)
