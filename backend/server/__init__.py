"""Server helpers shared by the HTTP layer."""

from .etag import generate_etag, get_cache_control, is_cache_fresh

__all__ = ["generate_etag", "get_cache_control", "is_cache_fresh"]
