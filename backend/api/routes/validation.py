"""Catalog validation API routes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from catalog.validator import load_and_validate_catalog
from db import get_repository

router = APIRouter()


@router.get("")
async def get_validation_route():
    """Formatted validation report of the configured catalog file."""
    report = await load_and_validate_catalog(get_repository().path)
    status_code = 200 if report["success"] else 422
    return JSONResponse(status_code=status_code, content=report)
