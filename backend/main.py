"""
CD Practices Graph Backend - FastAPI entry point.
Serves the practice catalog, materialized practice trees and adoption tooling.

Run from backend/: uvicorn main:app
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from api import register_routes
from config import CATALOG_PATH, ENVIRONMENT

app = FastAPI(title="CD Practices Graph Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["ETag"],
)

logger = logging.getLogger(__name__)


# API responses that do not set their own caching policy are never cached
NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class NoCacheMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        path = request.url.path
        if path.startswith("/api/") and "cache-control" not in response.headers:
            for k, v in NO_CACHE_HEADERS.items():
                response.headers[k] = v
        return response


app.add_middleware(NoCacheMiddleware)

# ========== API ROUTES ==========

register_routes(app)


@app.get("/health")
async def health():
    return {"status": "ok", "environment": ENVIRONMENT, "catalog": str(CATALOG_PATH)}


logger.info("Catalog path: %s", CATALOG_PATH)
