"""Record identity keys."""
import re

_SCHEME_HOST = re.compile(r"^https?://[^/]+")


def normalize_key(link: str) -> str:
    """Strip a leading ``scheme://host`` so the same item on two servers shares a key.

    Path and query are kept as-is. Links without a scheme/host prefix are
    returned unchanged, so the function is idempotent.
    """
    if not link:
        return ""
    return _SCHEME_HOST.sub("", link, count=1)
