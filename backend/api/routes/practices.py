"""Practice catalog API routes."""

from typing import Any, Dict, List, Mapping, Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger

from catalog.models import PracticeCategoryError, PracticeIdError
from config import DEFAULT_ROOT_ID, LAYOUT_ITERATIONS
from db import CatalogLoadError, get_repository
from layout import (
    calculate_total_connection_length,
    compute_tree_layout,
    count_crossings,
    group_by_category,
    optimize_layer_ordering,
)
from practice_tree import flatten_tree, group_by_level
from server.etag import generate_etag, get_cache_control, is_cache_fresh
from services import GetPracticeTreeService
from shared.graph import node_dependency_ids

from ..schemas import practice_payload

router = APIRouter()

_NOT_FOUND_ERRORS = {"PracticeNotFoundError"}
_BAD_REQUEST_ERRORS = {"PracticeIdError"}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/tree")
async def get_practice_tree(request: Request, root_id: str = Query(DEFAULT_ROOT_ID, alias="rootId")):
    """Materialized tree with ETag revalidation."""
    result = await GetPracticeTreeService(get_repository()).execute(root_id)
    if not result["success"]:
        error_type = result.get("errorType")
        if error_type in _NOT_FOUND_ERRORS:
            return _error(404, result["error"])
        if error_type in _BAD_REQUEST_ERRORS:
            return _error(400, result["error"])
        logger.error("Practice tree error: {}", result["error"])
        return _error(500, result["error"] or "Failed to load practice tree")

    etag = generate_etag(result["data"])
    headers = {"ETag": etag, "Cache-Control": get_cache_control()}
    if is_cache_fresh(request.headers.get("if-none-match"), etag):
        return Response(status_code=304, headers=headers)
    return JSONResponse(content=result, headers=headers)


def _level_node(node: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": node.get("id"),
        "name": node.get("name"),
        "category": node.get("category"),
        "maturityLevel": node.get("maturityLevel"),
        "level": node.get("level"),
        "dependencies": node_dependency_ids(node),
    }


@router.get("/levels")
async def get_practice_levels(
    root_id: str = Query(DEFAULT_ROOT_ID, alias="rootId"),
    iterations: Optional[int] = Query(None, ge=0, le=50),
    group_by_cat: bool = Query(False, alias="groupByCategory"),
):
    """Level-grouped tree with optimized ordering and node coordinates."""
    try:
        tree = await get_repository().get_practice_tree(root_id)
    except PracticeIdError as e:
        return _error(400, str(e))
    except CatalogLoadError as e:
        logger.exception("Error loading catalog")
        return _error(500, str(e))
    if tree is None:
        return _error(404, f"Practice not found: {root_id}")

    levels = group_by_level([_level_node(n) for n in flatten_tree(tree)])
    optimized = optimize_layer_ordering(levels, LAYOUT_ITERATIONS if iterations is None else iterations)
    if group_by_cat:
        optimized = group_by_category(optimized)
    return {
        "rootId": root_id,
        "levels": {str(k): v for k, v in optimized.items()},
        "crossings": {"before": count_crossings(levels), "after": count_crossings(optimized)},
        "connectionLength": calculate_total_connection_length(optimized),
        "layout": compute_tree_layout(optimized),
    }


@router.get("")
async def list_practices(category: Optional[str] = Query(None)):
    repo = get_repository()
    try:
        practices = await repo.find_by_category(category) if category else await repo.find_all()
    except PracticeCategoryError as e:
        return _error(400, str(e))
    except CatalogLoadError as e:
        logger.exception("Error loading catalog")
        return _error(500, str(e))
    items: List[Dict[str, Any]] = [practice_payload(p) for p in practices]
    return {"practices": items, "count": len(items)}


@router.get("/{practice_id}")
async def get_practice(practice_id: str):
    repo = get_repository()
    try:
        practice = await repo.find_by_id(practice_id)
    except PracticeIdError as e:
        return _error(400, str(e))
    except CatalogLoadError as e:
        logger.exception("Error loading catalog")
        return _error(500, str(e))
    if practice is None:
        return _error(404, f"Practice not found: {practice_id}")
    prerequisites = await repo.find_practice_prerequisites(practice.id)
    return {
        "practice": practice_payload(practice),
        "prerequisites": [p["practice"].id for p in prerequisites],
        "totalDependencies": await repo.count_total_dependencies(practice.id),
        "categories": await repo.get_transitive_categories(practice.id),
    }
