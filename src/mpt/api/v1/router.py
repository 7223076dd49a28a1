"""
API v1 Router

Aggregates all API endpoints.
"""

from fastapi import APIRouter

from mpt.api.v1.endpoints.catalog import router as catalog_router
from mpt.api.v1.endpoints.chat import router as chat_router
from mpt.api.v1.endpoints.health import router as health_router
from mpt.api.v1.endpoints.sessions import router as sessions_router

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    health_router,
    prefix="/health",
    tags=["Health"],
)

api_router.include_router(
    chat_router,
    tags=["Chat"],
)

api_router.include_router(
    sessions_router,
    prefix="/sessions",
    tags=["Sessions"],
)

api_router.include_router(
    catalog_router,
    tags=["Catalog"],
)
