"""
Main FastAPI application entry point for the search service.
"""

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from app.core.cache import CacheService, create_redis_client
from app.core.config import settings
from app.core.dependencies import get_search_service
from app.core.exceptions import (
    search_service_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)
from app.core.middleware import LoggingMiddleware, SecurityHeadersMiddleware
from app.core.rate_limit import limiter
from app.api.routes import api_router
from app.services.history_service import HistoryService
from app.services.index_service import IndexService
from app.services.result_cache import ResultCache
from app.services.saved_search_service import SavedSearchService
from app.services.search_engine import SearchEngineClient, create_search_engine
from app.services.search_service import SearchService
from app.utils.exceptions import SearchServiceException


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(f"Starting search service ({settings.ENVIRONMENT})")

    engine = SearchEngineClient(create_search_engine(settings))
    redis_client = create_redis_client(settings)
    result_cache = ResultCache(CacheService(redis_client), ttl=settings.SEARCH_CACHE_TTL)

    app.state.search_service = SearchService(engine, result_cache, settings)
    app.state.index_service = IndexService(engine, result_cache, settings)
    app.state.history_service = HistoryService(redis_client, max_entries=settings.HISTORY_MAX_ENTRIES)
    app.state.saved_search_service = SavedSearchService(redis_client)

    if not await engine.ping():
        logger.warning(f"Search engine not reachable at {settings.ELASTICSEARCH_URL}; searches will return empty results")
    if not await result_cache.cache.ping():
        logger.warning("Redis not reachable; caching and history are disabled until it recovers")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down search service")
    await engine.close()
    await redis_client.aclose()


# Create FastAPI app
app = FastAPI(
    title="Search Service API",
    description="Full-text search over messages, files, users, channels and more",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add rate limiter to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add custom middleware (order matters - first added is outermost)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add exception handlers
app.add_exception_handler(SearchServiceException, search_service_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include API routes
app.include_router(api_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health")
async def health_check(search_service: SearchService = Depends(get_search_service)):
    """Health check endpoint."""
    return await search_service.health_check()


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Search Service API",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=1 if settings.DEBUG else settings.WORKERS
    )
