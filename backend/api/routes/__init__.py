"""API route modules."""

from fastapi import FastAPI

from . import adoption, practices, validation


def register_routes(app: FastAPI) -> None:
    """Register all API routers."""
    app.include_router(practices.router, prefix="/api/practices", tags=["practices"])
    app.include_router(adoption.router, prefix="/api/adoption", tags=["adoption"])
    app.include_router(validation.router, prefix="/api/validation", tags=["validation"])
