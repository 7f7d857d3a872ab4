"""Fake listing upstream served through httpx.MockTransport."""
import base64
import gzip
from typing import Iterable, Optional

import httpx
import orjson

from src.fetch.client import FetchClient
from src.fetch.transport import DirectTransport
from src.parse.kinds import KIND_SPECS, RecordKind

LEFT = "s10-nacd1.dentons.com"
RIGHT = "s10-eucd1.dentons.com"


def make_records(domain: str, keys: Iterable, kind: RecordKind = RecordKind.INSIGHTS) -> list[dict]:
    """Records whose link path is shared across domains for the same key."""
    records = []
    for key in keys:
        link = f"https://{domain}/en/{kind.value}/item-{key}"
        if kind is RecordKind.PEOPLE:
            records.append({"link": link, "firstName": f"First{key}", "lastName": f"Last{key}", "jobTitle": "Partner"})
        else:
            records.append({"link": link, "heading": f"Item {key}", "date": "January 1, 2024"})
    return records


class FakeUpstream:
    """In-memory listing servers.

    Pages are sliced from the full record list; ``hidden`` links are removed
    from a page after slicing (server-side filtering after pagination), so
    the other records keep their page positions.
    """

    def __init__(self, gzip_bodies: bool = False, wrap_in_array: bool = True):
        self.gzip_bodies = gzip_bodies
        self.wrap_in_array = wrap_in_array
        self.listings: dict[tuple[str, RecordKind], dict] = {}
        self.failing: dict[tuple[str, int], Optional[int]] = {}
        self.empty_page_sizes: dict[str, set[int]] = {}
        self.failing_page_sizes: dict[str, set[int]] = {}
        self.broken_encoding: set[tuple[str, int]] = set()
        self.requests: list[tuple[str, str, int, int]] = []

    def add_listing(
        self,
        domain: str,
        records: list[dict],
        kind: RecordKind = RecordKind.INSIGHTS,
        hidden: Iterable[str] = (),
        total: Optional[int] = None,
    ) -> None:
        hidden_links = set(hidden)
        self.listings[(domain, kind)] = {
            "records": records,
            "hidden": hidden_links,
            "total": total if total is not None else len(records) - len(hidden_links),
        }

    def fail_page(self, domain: str, page: int, times: Optional[int] = None) -> None:
        """Answer 503 for a page, ``times`` times or forever."""
        self.failing[(domain, page)] = times

    def content_requests(self) -> list[tuple[str, str, int, int]]:
        """Requests other than the size-1 totals requests."""
        return [r for r in self.requests if r[3] != 1]

    def _encode(self, payload: dict) -> str:
        body = orjson.dumps([payload] if self.wrap_in_array else payload)
        if self.gzip_bodies:
            return base64.b64encode(gzip.compress(body)).decode()
        return body.decode()

    def handler(self, request: httpx.Request) -> httpx.Response:
        domain = request.url.host
        kind = next(k for k, spec in KIND_SPECS.items() if spec.service_path == request.url.path)
        page = int(request.url.params["pageNumber"])
        size = int(request.url.params["pageSize"])
        self.requests.append((domain, kind.value, page, size))

        key = (domain, page)
        if key in self.failing:
            remaining = self.failing[key]
            if remaining is None or remaining > 0:
                if remaining is not None:
                    self.failing[key] = remaining - 1
                return httpx.Response(503, text="Service Unavailable")

        if size in self.failing_page_sizes.get(domain, set()):
            return httpx.Response(503, text="Service Unavailable")
        if key in self.broken_encoding:
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip")

        listing = self.listings.get((domain, kind))
        if listing is None:
            return httpx.Response(404, text="Not Found")

        chunk = listing["records"][(page - 1) * size: page * size]
        chunk = [record for record in chunk if record.get("link") not in listing["hidden"]]
        if size in self.empty_page_sizes.get(domain, set()):
            chunk = []
        payload = {"totalResult": listing["total"], KIND_SPECS[kind].records_field: chunk}
        return httpx.Response(200, text=self._encode(payload))

    def client(self, **kwargs) -> FetchClient:
        kwargs.setdefault("retry_base_delay", 0)
        return FetchClient(
            transport=DirectTransport(),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)),
            **kwargs,
        )
