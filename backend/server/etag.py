"""
HTTP caching helpers: content ETags and Cache-Control policy.
"""

import hashlib
from typing import Any, Optional

import orjson

import config


def generate_etag(data: Any) -> str:
    """Quoted SHA-1 of the canonical (sorted-key) JSON encoding of data."""
    payload = orjson.dumps(data, option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS)
    return f'"{hashlib.sha1(payload).hexdigest()}"'


def get_cache_control(max_age: Optional[int] = None) -> str:
    if not config.is_production():
        return "no-cache, must-revalidate"
    age = config.CACHE_MAX_AGE if max_age is None else max_age
    return f"public, max-age={age}, must-revalidate"


def is_cache_fresh(if_none_match: Optional[str], etag: str) -> bool:
    """True when the client's If-None-Match lists etag (weak validators compare equal)."""
    if not if_none_match or not if_none_match.strip():
        return False
    for candidate in if_none_match.split(","):
        candidate = candidate.strip()
        if candidate.startswith("W/"):
            candidate = candidate[2:]
        if candidate == etag or candidate == "*":
            return True
    return False
