"""
Runtime configuration read from the environment.
All values are module-level constants resolved once at import.
"""

import os
from pathlib import Path

BACKEND_DIR = Path(__file__).parent


def _int_env(name: str, default: int) -> int:
    v = os.environ.get(name)
    return int(v) if v is not None else default


CATALOG_PATH = Path(os.environ.get("CDPG_CATALOG_PATH") or BACKEND_DIR / "db" / "cd-practices.json")
DEFAULT_ROOT_ID = os.environ.get("CDPG_DEFAULT_ROOT_ID", "continuous-delivery")
ENVIRONMENT = os.environ.get("CDPG_ENV", "development")
CACHE_MAX_AGE = _int_env("CDPG_CACHE_MAX_AGE", 3600)
LAYOUT_ITERATIONS = _int_env("CDPG_LAYOUT_ITERATIONS", 3)
PERSIST_DEBOUNCE_MS = _int_env("CDPG_PERSIST_DEBOUNCE_MS", 500)


def is_production() -> bool:
    return os.environ.get("CDPG_ENV", ENVIRONMENT) == "production"
