"""Adoption API routes: summaries, URL state and .cdpa export/import."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from adoption import (
    calculate_adopted_dependencies,
    create_export_data,
    filter_valid_practice_ids,
    generate_export_filename,
    import_adoption_state,
    summarize_adoption,
)
from adoption.engine import build_practice_map
from db import CatalogLoadError, get_repository
from state.url_state import decode_adoption_state, encode_adoption_state, update_url_with_adoption_state

from ..schemas import AdoptionExportRequest, AdoptionSummaryRequest, AdoptionUrlRequest

router = APIRouter()


@router.post("/summary")
async def adoption_summary(body: AdoptionSummaryRequest):
    """Sanitized adoption set with overall and per-practice counts."""
    try:
        catalog = await get_repository().load()
    except CatalogLoadError as e:
        logger.exception("Error loading catalog")
        return JSONResponse(status_code=500, content={"error": str(e)})

    requested = set(body.adopted or ())
    if body.state:
        requested |= decode_adoption_state(body.state)
    summary = summarize_adoption(catalog, requested)

    if body.root_id:
        practice_map = build_practice_map(catalog)
        root = practice_map.get(body.root_id)
        if root is None:
            return JSONResponse(status_code=404, content={"error": f"Practice not found: {body.root_id}"})
        summary["root"] = {"id": body.root_id, **calculate_adopted_dependencies(root, summary["adoptedPractices"], practice_map)}

    summary["ignored"] = sorted(requested - set(summary["adoptedPractices"]))
    summary["state"] = encode_adoption_state(summary["adoptedPractices"])
    return summary


@router.post("/export")
async def adoption_export(body: AdoptionExportRequest):
    try:
        valid = await get_repository().valid_practice_ids()
    except CatalogLoadError as e:
        logger.exception("Error loading catalog")
        return JSONResponse(status_code=500, content={"error": str(e)})
    adopted = filter_valid_practice_ids(body.adopted, valid)
    return {
        "filename": generate_export_filename(),
        "data": create_export_data(adopted, len(valid), app_version=body.app_version),
    }


@router.post("/import")
async def adoption_import(request: Request):
    """Body is the raw .cdpa document."""
    try:
        valid = await get_repository().valid_practice_ids()
    except CatalogLoadError as e:
        logger.exception("Error loading catalog")
        return JSONResponse(status_code=500, content={"error": str(e)})
    content = await request.body()
    result = import_adoption_state(content, valid)
    if not result["success"]:
        return JSONResponse(status_code=400, content={"success": False, "error": result["error"]})
    return {
        "success": True,
        "imported": sorted(result["imported"]),
        "invalid": result["invalid"],
        "metadata": result["metadata"],
    }


@router.post("/url")
async def adoption_url(body: AdoptionUrlRequest):
    """Rewrite the `adopted` parameter of a URL."""
    return {"url": update_url_with_adoption_state(body.url, body.adopted)}
