"""
Export and import of adoption sets as `.cdpa` JSON documents.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

import aiofiles
import orjson
from loguru import logger

from .engine import calculate_adoption_percentage, filter_valid_practice_ids

EXPORT_SCHEMA = "https://json-schema.org/draft-07/schema#"
EXPORT_VERSION = "1.0.0"
DEFAULT_APP_VERSION = "1.0.0"
FILE_PREFIX = "cd-practices-adoption"
FILE_EXTENSION = ".cdpa"
REQUIRED_FIELDS = ("version", "exportedAt", "adoptedPractices")

INVALID_JSON_MESSAGE = "Invalid JSON format. Please check the file and try again."


def _now(now: Optional[datetime]) -> datetime:
    return (now or datetime.now(timezone.utc)).astimezone(timezone.utc)


def _iso_millis(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def generate_export_filename(now: Optional[datetime] = None) -> str:
    return f"{FILE_PREFIX}-{_now(now).strftime('%Y-%m-%d')}{FILE_EXTENSION}"


def create_export_data(
    adopted: Iterable[str],
    total_practices: int,
    app_version: str = DEFAULT_APP_VERSION,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    ids = sorted(set(adopted or ()))
    return {
        "$schema": EXPORT_SCHEMA,
        "version": EXPORT_VERSION,
        "exportedAt": _iso_millis(_now(now)),
        "metadata": {
            "totalPractices": total_practices,
            "adoptedCount": len(ids),
            "adoptionPercentage": calculate_adoption_percentage(len(ids), total_practices),
            "appVersion": app_version,
        },
        "adoptedPractices": ids,
    }


def validate_import_data(data: Any) -> Dict[str, Any]:
    """Structural check of an import document -> {valid, errors}."""
    if not isinstance(data, dict):
        return {"valid": False, "errors": ["Import data must be an object"]}
    errors = [f"Missing required field: {f}" for f in REQUIRED_FIELDS if f not in data]
    if "adoptedPractices" in data and not isinstance(data["adoptedPractices"], list):
        errors.append("adoptedPractices must be an array")
    if "version" in data:
        major = str(data["version"]).split(".")[0]
        if major != EXPORT_VERSION.split(".")[0]:
            errors.append(f"Incompatible file version: {data['version']}")
    return {"valid": not errors, "errors": errors}


def _clean_ids(raw: List[Any]) -> List[str]:
    """Non-blank string ids in input order, without repeats."""
    return list(dict.fromkeys(x.strip() for x in raw if isinstance(x, str) and x.strip()))


def _parse(text: Union[str, bytes]) -> Tuple[Dict[str, Any], List[str]]:
    try:
        data = orjson.loads(text)
    except orjson.JSONDecodeError as e:
        logger.warning("Import file is not valid JSON: {}", e)
        return {"success": False, "error": INVALID_JSON_MESSAGE}, []
    check = validate_import_data(data)
    if not check["valid"]:
        return {"success": False, "error": "Invalid file format: " + ", ".join(check["errors"])}, []
    ids = _clean_ids(data["adoptedPractices"])
    return {"success": True, "data": frozenset(ids), "metadata": data.get("metadata") or {}}, ids


def parse_import_content(text: Union[str, bytes]) -> Dict[str, Any]:
    """-> {success, data (frozenset), metadata} or {success: False, error}."""
    return _parse(text)[0]


async def parse_import_file(path: Union[str, Path]) -> Dict[str, Any]:
    try:
        async with aiofiles.open(path, "rb") as f:
            content = await f.read()
    except OSError as e:
        logger.warning("Failed to read import file {}: {}", path, e)
        return {"success": False, "error": f"Failed to read file: {e}"}
    return parse_import_content(content)


def import_adoption_state(text: Union[str, bytes], valid_ids: Iterable[str]) -> Dict[str, Any]:
    """Parse and filter against valid_ids -> imported set plus invalid ids (input order)."""
    result, ids = _parse(text)
    if not result["success"]:
        return result
    valid = frozenset(valid_ids or ())
    imported: FrozenSet[str] = filter_valid_practice_ids(ids, valid)
    return {
        "success": True,
        "imported": imported,
        "invalid": [pid for pid in ids if pid not in valid],
        "metadata": result["metadata"],
    }
