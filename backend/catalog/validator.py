"""
Catalog Validator - integrity checks over raw catalog data.

Each check is independent and returns a ValidationResult; problems are reported
as data (frozen error values), never raised. Only a malformed top-level shape
raises CatalogSchemaError. Inputs are never mutated.
"""

import re
from collections import Counter
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

import aiofiles
import orjson
from loguru import logger
from pydantic import BaseModel, ConfigDict

from shared.graph import graph_from_raw

from .models import CatalogSchemaError, PracticeCategory, PracticeType, is_valid_practice_id

_SEMVER = re.compile(r"^\d+\.\d+\.\d+$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ---------------------------------------------------------------------------
# Error values
# ---------------------------------------------------------------------------

class CatalogError(BaseModel):
    model_config = ConfigDict(frozen=True)
    code: str
    message: str


class DuplicateIdsError(CatalogError):
    code: str = "duplicate_ids"
    message: str = "Duplicate practice IDs found"
    duplicates: Tuple[str, ...]


class InvalidReferenceError(CatalogError):
    code: str = "invalid_reference"
    message: str = "Invalid dependency reference"
    reason: str


class SelfDependencyError(CatalogError):
    code: str = "self_dependency"
    message: str = "Self-dependency detected"
    practice_id: str


class InvalidCategoryError(CatalogError):
    code: str = "invalid_category"
    message: str = "Invalid category"
    practice_id: Optional[str] = None
    category: Any = None


class CycleError(CatalogError):
    code: str = "cycle"
    message: str = "Circular dependency detected"
    cycle: Tuple[str, ...]


class DuplicateDependencyError(CatalogError):
    code: str = "duplicate_dependency"
    message: str = "Duplicate dependency"
    practice_id: str
    depends_on_id: str


class MissingRootError(CatalogError):
    code: str = "missing_root"
    message: str = "No root practice found"


class InvalidPracticeError(CatalogError):
    code: str = "invalid_practice"
    message: str = "Invalid practice"
    practice_id: Optional[str] = None
    field: str
    reason: str


class InvalidMetadataError(CatalogError):
    code: str = "invalid_metadata"
    message: str = "Invalid metadata"
    field: str
    reason: str


class ValidationResult(NamedTuple):
    is_valid: bool
    errors: Tuple[CatalogError, ...] = ()


def _result(errors: Iterable[CatalogError]) -> ValidationResult:
    errors = tuple(errors)
    return ValidationResult(is_valid=not errors, errors=errors)


def _practices(data: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    return [p for p in data.get("practices") or [] if isinstance(p, Mapping)]


def _dependencies(data: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    return [d for d in data.get("dependencies") or [] if isinstance(d, Mapping)]


# ---------------------------------------------------------------------------
# 1. Shape
# ---------------------------------------------------------------------------

def validate_catalog_shape(data: Any) -> None:
    """Raise CatalogSchemaError listing every top-level structural problem."""
    if not isinstance(data, Mapping):
        raise CatalogSchemaError(["catalog must be an object"])
    problems = []
    for key in ("practices", "dependencies"):
        if key not in data:
            problems.append(f"missing '{key}'")
        elif not isinstance(data[key], list):
            problems.append(f"'{key}' must be an array")
    if "metadata" not in data:
        problems.append("missing 'metadata'")
    elif not isinstance(data["metadata"], Mapping):
        problems.append("'metadata' must be an object")
    if problems:
        raise CatalogSchemaError(problems)


# ---------------------------------------------------------------------------
# 2. Sub-checks
# ---------------------------------------------------------------------------

def validate_unique_practice_ids(data: Mapping[str, Any]) -> ValidationResult:
    counts = Counter(p.get("id") for p in _practices(data) if isinstance(p.get("id"), str))
    duplicates = sorted(pid for pid, n in counts.items() if n > 1)
    if not duplicates:
        return _result([])
    return _result([DuplicateIdsError(duplicates=tuple(duplicates))])


def validate_dependency_references(data: Mapping[str, Any]) -> ValidationResult:
    known = {p.get("id") for p in _practices(data) if isinstance(p.get("id"), str)}
    errors = []
    for dep in _dependencies(data):
        for key in ("practice_id", "depends_on_id"):
            ref = dep.get(key)
            if not isinstance(ref, str) or ref not in known:
                errors.append(InvalidReferenceError(reason=f"{key} '{ref}' does not reference an existing practice"))
    return _result(errors)


def validate_no_self_dependencies(data: Mapping[str, Any]) -> ValidationResult:
    errors = [
        SelfDependencyError(practice_id=d["practice_id"])
        for d in _dependencies(data)
        if isinstance(d.get("practice_id"), str) and d.get("practice_id") == d.get("depends_on_id")
    ]
    return _result(errors)


def validate_no_duplicate_dependencies(data: Mapping[str, Any]) -> ValidationResult:
    seen = set()
    errors = []
    for d in _dependencies(data):
        edge = (d.get("practice_id"), d.get("depends_on_id"))
        if not all(isinstance(x, str) for x in edge):
            continue
        if edge in seen:
            errors.append(DuplicateDependencyError(practice_id=edge[0], depends_on_id=edge[1]))
        seen.add(edge)
    return _result(errors)


def validate_categories(data: Mapping[str, Any]) -> ValidationResult:
    allowed = set(PracticeCategory.values())
    errors = []
    for p in _practices(data):
        category = p.get("category")
        if not isinstance(category, str) or category not in allowed:
            pid = p.get("id") if isinstance(p.get("id"), str) else None
            errors.append(InvalidCategoryError(practice_id=pid, category=category))
    return _result(errors)


def validate_no_cycles(data: Mapping[str, Any]) -> ValidationResult:
    """Depth-first search with a recursion stack; every cycle closed in one pass is reported."""
    G = graph_from_raw(data)
    visited = set()
    path: List[str] = []
    on_path = set()
    cycles: List[Tuple[str, ...]] = []

    def visit(node: str) -> None:
        visited.add(node)
        path.append(node)
        on_path.add(node)
        for nxt in G.successors(node):
            if nxt in on_path:
                start = path.index(nxt)
                cycles.append(tuple(path[start:]) + (nxt,))
            elif nxt not in visited:
                visit(nxt)
        path.pop()
        on_path.discard(node)

    for node in list(G.nodes()):
        if node not in visited:
            visit(node)
    return _result(CycleError(cycle=c) for c in cycles)


def validate_root_exists(data: Mapping[str, Any]) -> ValidationResult:
    if any(p.get("type") == PracticeType.ROOT.value for p in _practices(data)):
        return _result([])
    return _result([MissingRootError()])


def _check_string_list(p: Mapping[str, Any], field: str) -> Optional[str]:
    items = p.get(field)
    if not isinstance(items, list) or not items:
        return f"at least one {field[:-1] if field.endswith('s') else field} is required"
    if any(not isinstance(i, str) or not i.strip() for i in items):
        return f"{field} must be non-empty strings"
    return None


def validate_practice_fields(data: Mapping[str, Any]) -> ValidationResult:
    errors: List[CatalogError] = []
    types = {t.value for t in PracticeType}
    for raw in data.get("practices") or []:
        if not isinstance(raw, Mapping):
            errors.append(InvalidPracticeError(field="practice", reason="practice must be an object"))
            continue
        pid = raw.get("id")
        label = pid if isinstance(pid, str) else None

        def add(field: str, reason: str) -> None:
            errors.append(InvalidPracticeError(practice_id=label, field=field, reason=reason))

        if not is_valid_practice_id(pid):
            add("id", "id must be kebab-case")
        for field in ("name", "description"):
            value = raw.get(field)
            if not isinstance(value, str) or not value.strip():
                add(field, f"{field} is required")
        if raw.get("type") not in types:
            add("type", f"type must be one of: {', '.join(sorted(types))}")
        for field in ("requirements", "benefits"):
            reason = _check_string_list(raw, field)
            if reason:
                add(field, reason)
        level = raw.get("maturityLevel")
        if level is not None and (isinstance(level, bool) or not isinstance(level, int) or not 0 <= level <= 3):
            add("maturityLevel", "maturityLevel must be an integer between 0 and 3")
    return _result(errors)


def validate_metadata(data: Mapping[str, Any]) -> ValidationResult:
    metadata = data.get("metadata")
    if not isinstance(metadata, Mapping):
        return _result([])
    errors = []
    version = metadata.get("version")
    if version is not None and (not isinstance(version, str) or not _SEMVER.match(version)):
        errors.append(InvalidMetadataError(field="version", reason="version must be semantic (MAJOR.MINOR.PATCH)"))
    updated = metadata.get("lastUpdated")
    if updated is not None and (not isinstance(updated, str) or not _ISO_DATE.match(updated)):
        errors.append(InvalidMetadataError(field="lastUpdated", reason="lastUpdated must be YYYY-MM-DD"))
    return _result(errors)


CHECKS: Dict[str, Callable[[Mapping[str, Any]], ValidationResult]] = {
    "unique_ids": validate_unique_practice_ids,
    "references": validate_dependency_references,
    "self_dependencies": validate_no_self_dependencies,
    "duplicate_dependencies": validate_no_duplicate_dependencies,
    "categories": validate_categories,
    "practice_fields": validate_practice_fields,
    "metadata": validate_metadata,
    "root_exists": validate_root_exists,
    "cycles": validate_no_cycles,
}


# ---------------------------------------------------------------------------
# 3. Aggregation and reporting
# ---------------------------------------------------------------------------

def combine_validations(results: Iterable[ValidationResult]) -> ValidationResult:
    errors: List[CatalogError] = []
    for r in results:
        errors.extend(r.errors)
    return _result(errors)


def validate_catalog(data: Any, checks: Optional[Iterable[str]] = None) -> ValidationResult:
    """Shape check, then all (or the named) sub-checks combined."""
    validate_catalog_shape(data)
    names = list(checks) if checks is not None else list(CHECKS)
    unknown = [n for n in names if n not in CHECKS]
    if unknown:
        raise ValueError(f"Unknown validation checks: {', '.join(unknown)}")
    return combine_validations(CHECKS[n](data) for n in names)


def format_validation_errors(result: ValidationResult) -> Dict[str, Any]:
    if result.is_valid:
        return {"success": True, "message": "Validation passed", "errors": []}
    errors = [
        {"index": i, **e.model_dump(mode="json")}
        for i, e in enumerate(result.errors, start=1)
    ]
    return {
        "success": False,
        "message": f"Validation failed with {len(errors)} error(s)",
        "errors": errors,
    }


async def load_and_validate_catalog(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a catalog file and return its formatted validation report."""
    try:
        async with aiofiles.open(path, "rb") as f:
            data = orjson.loads(await f.read())
    except FileNotFoundError:
        return {"success": False, "message": f"Catalog file not found: {path}", "errors": []}
    except orjson.JSONDecodeError as e:
        logger.warning("Invalid JSON in {}: {}", path, e)
        return {"success": False, "message": f"Invalid JSON in catalog file: {e}", "errors": []}
    try:
        result = validate_catalog(data)
    except CatalogSchemaError as e:
        return {"success": False, "message": str(e), "errors": []}
    return format_validation_errors(result)
