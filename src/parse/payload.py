"""Decode listing API response bodies."""
import base64
import binascii
import gzip
import logging
import zlib
from typing import Any

import orjson

logger = logging.getLogger(__name__)

# base64 of the gzip header bytes 1f 8b 08
GZIP_BASE64_MAGIC = "H4sI"


class PayloadDecodeError(ValueError):
    """Body is neither JSON nor base64-encoded gzipped JSON."""


def decode_body(text: str) -> Any:
    """Parse a response body, inflating it first when it is base64 gzip."""
    body = text.strip()
    try:
        if body.startswith(GZIP_BASE64_MAGIC):
            raw = gzip.decompress(base64.b64decode(body))
            return orjson.loads(raw)
        return orjson.loads(body)
    except (binascii.Error, OSError, EOFError, zlib.error, orjson.JSONDecodeError) as e:
        raise PayloadDecodeError(f"Could not decode listing payload: {e}") from e


def unwrap(parsed: Any) -> dict[str, Any]:
    """Listing payloads are sometimes wrapped in a one-element array."""
    if isinstance(parsed, list):
        parsed = parsed[0] if parsed else {}
    if not isinstance(parsed, dict):
        raise PayloadDecodeError(f"Unexpected payload type: {type(parsed).__name__}")
    return parsed


def decode_payload(text: str) -> dict[str, Any]:
    """Decode and unwrap a listing response body."""
    return unwrap(decode_body(text))


def read_total(payload: dict[str, Any]) -> int | None:
    """Return ``totalResult`` as an int, or None when absent or malformed."""
    total = payload.get("totalResult")
    if isinstance(total, bool):
        return None
    if isinstance(total, int):
        return total
    if isinstance(total, str) and total.strip().isdigit():
        return int(total.strip())
    return None
