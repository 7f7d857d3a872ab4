"""Tests for listing payload decoding."""
import base64
import gzip
import json

import pytest
from src.parse.payload import PayloadDecodeError, decode_payload, read_total


def _gzip_b64(data) -> str:
    return base64.b64encode(gzip.compress(json.dumps(data).encode())).decode()


def test_decode_plain_json():
    """Plain JSON objects are returned as-is."""
    assert decode_payload('{"totalResult": 3, "NewsData": []}') == {"totalResult": 3, "NewsData": []}


def test_decode_gzip_base64():
    """Bodies starting with the gzip base64 magic are inflated."""
    text = _gzip_b64({"totalResult": 7, "tabData": [{"link": "https://a.com/x"}]})
    assert text.startswith("H4sI")
    payload = decode_payload(text)
    assert payload["totalResult"] == 7
    assert payload["tabData"][0]["link"] == "https://a.com/x"


def test_decode_unwraps_array():
    """A payload wrapped in an array is unwrapped to its first element."""
    assert decode_payload('[{"totalResult": 2}]') == {"totalResult": 2}
    assert decode_payload(_gzip_b64([{"totalResult": 4}])) == {"totalResult": 4}


def test_decode_invalid_body():
    """Garbage raises PayloadDecodeError."""
    with pytest.raises(PayloadDecodeError):
        decode_payload("<html>Error</html>")
    with pytest.raises(PayloadDecodeError):
        decode_payload("H4sInot-really-gzip")


def test_decode_non_object():
    """A JSON scalar is not a listing payload."""
    with pytest.raises(PayloadDecodeError):
        decode_payload("42")


def test_read_total():
    """totalResult is read as an int when present."""
    assert read_total({"totalResult": 12}) == 12
    assert read_total({"totalResult": "15"}) == 15
    assert read_total({}) is None
    assert read_total({"totalResult": None}) is None
    assert read_total({"totalResult": True}) is None
