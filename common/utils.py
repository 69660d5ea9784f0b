from __future__ import annotations

import base64
import hashlib
import re
from email.utils import parsedate_to_datetime
from typing import List, Mapping, Optional, Union


_NO_CACHE_RE = re.compile(r"(?:^|,)\s*?no-cache\s*?(?:,|$)")
_TRUTHY = ("", "true", "1")


def generate_etag(body: Union[str, bytes]) -> str:
    """
    Strong ETag for a response body: '"<byte length hex>-<base64 sha1[:27]>"'.
    The same body always yields the same tag.
    """
    data = body.encode("utf-8") if isinstance(body, str) else bytes(body)
    digest = base64.b64encode(hashlib.sha1(data).digest()).decode("ascii")[:27]
    return f'"{len(data):x}-{digest}"'


def _token_list(value: str) -> List[str]:
    return [t.strip() for t in value.split(",") if t.strip()]


def _http_date(value: Optional[str]):
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


def is_fresh(
    request_headers: Mapping[str, str],
    etag: Optional[str],
    last_modified: Optional[str] = None,
) -> bool:
    """
    Conditional GET check: True when the client's cached copy is current.

    - No If-None-Match / If-Modified-Since -> stale
    - Cache-Control: no-cache -> stale
    - If-None-Match: '*' or a list containing our tag (weak or strong) -> fresh
    - If-Modified-Since needs a Last-Modified validator not newer than it
    """
    h = {str(k).lower(): v for k, v in request_headers.items()}
    modified_since = h.get("if-modified-since")
    none_match = h.get("if-none-match")
    if not modified_since and not none_match:
        return False

    cache_control = h.get("cache-control")
    if cache_control and _NO_CACHE_RE.search(cache_control):
        return False

    if none_match and none_match != "*":
        if not etag:
            return False
        matched = any(
            m == etag or m == f"W/{etag}" or f"W/{m}" == etag
            for m in _token_list(none_match)
        )
        if not matched:
            return False

    if modified_since:
        lm = _http_date(last_modified)
        ms = _http_date(modified_since)
        if lm is None or ms is None or lm > ms:
            return False

    return True


def qs_toggle(query: Mapping[str, str], key: str) -> bool:
    """Truthy query flag: ?debug, ?debug=true and ?debug=1 all enable it."""
    return query.get(key) in _TRUTHY
