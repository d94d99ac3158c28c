"""
URL state codec for adoption sets.

The adopted ids travel in the `adopted` query parameter as standard base64 of
the sorted, comma-joined ids. Rewriting a URL touches only that parameter; the
path, fragment and every other parameter (including the legacy
`feature=practice-adoption` flag) are kept as they were.
"""

import base64
import binascii
from typing import FrozenSet, Iterable, List, Optional, Tuple
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from loguru import logger

ADOPTED_PARAM = "adopted"
LEGACY_FEATURE_PARAM = "feature"
LEGACY_FEATURE_VALUE = "practice-adoption"


def encode_adoption_state(ids: Optional[Iterable[str]]) -> str:
    """Sorted, comma-joined, base64 encoded. Empty set -> ""."""
    ids = sorted(set(ids or ()))
    if not ids:
        return ""
    return base64.b64encode(",".join(ids).encode("utf-8")).decode("ascii")


def decode_adoption_state(value: Optional[str]) -> FrozenSet[str]:
    """Inverse of encode_adoption_state. Malformed input -> empty set (logged)."""
    if not value:
        return frozenset()
    try:
        raw = base64.b64decode(value.strip(), validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        logger.warning("Failed to decode adoption state from URL: {}", e)
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def _split_query(query: str) -> List[Tuple[str, str]]:
    """(decoded name, raw pair) for every non-empty query component."""
    pairs = []
    for raw in query.split("&"):
        if not raw:
            continue
        name = unquote(raw.split("=", 1)[0])
        pairs.append((name, raw))
    return pairs


def _param(url: str, name: str) -> Optional[str]:
    for key, raw in _split_query(urlsplit(url).query):
        if key == name:
            return unquote(raw.split("=", 1)[1]) if "=" in raw else ""
    return None


def get_adoption_state_from_url(url: str) -> Optional[FrozenSet[str]]:
    """Adopted ids from a URL. None when the parameter is absent or empty."""
    value = _param(url, ADOPTED_PARAM)
    if not value:
        return None
    return decode_adoption_state(value)


def update_url_with_adoption_state(url: str, ids: Optional[Iterable[str]]) -> str:
    """Rewrite only the `adopted` parameter; removed when ids is empty."""
    parts = urlsplit(url)
    kept = [raw for key, raw in _split_query(parts.query) if key != ADOPTED_PARAM]
    encoded = encode_adoption_state(ids)
    if encoded:
        kept.append(f"{ADOPTED_PARAM}={quote(encoded, safe='')}")
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "&".join(kept), parts.fragment))


def has_legacy_feature_flag(url: str) -> bool:
    return _param(url, LEGACY_FEATURE_PARAM) == LEGACY_FEATURE_VALUE
