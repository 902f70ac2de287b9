"""
Main API router configuration.
"""

from fastapi import APIRouter
from app.api.endpoints import index, search, searches

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(searches.router, prefix="/search", tags=["search history"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(index.router, prefix="/index", tags=["index"])
