"""State module - URL and storage encodings of adoption sets."""

from .persistence import (
    STORAGE_KEY,
    FileStorage,
    MemoryStorage,
    Storage,
    clear_adoption_state,
    load_adoption_state,
    save_adoption_state,
)
from .url_state import (
    decode_adoption_state,
    encode_adoption_state,
    get_adoption_state_from_url,
    has_legacy_feature_flag,
    update_url_with_adoption_state,
)

__all__ = [
    "STORAGE_KEY",
    "FileStorage",
    "MemoryStorage",
    "Storage",
    "clear_adoption_state",
    "decode_adoption_state",
    "encode_adoption_state",
    "get_adoption_state_from_url",
    "has_legacy_feature_flag",
    "load_adoption_state",
    "save_adoption_state",
    "update_url_with_adoption_state",
]
