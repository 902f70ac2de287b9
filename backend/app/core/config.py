"""
Application configuration settings.
"""

import sys
from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings
from loguru import logger

from app.core.logging import add_correlation_id


class Settings(BaseSettings):
    """Application settings."""

    # Search engine
    ELASTICSEARCH_URL: str = "http://localhost:9200"
    ELASTICSEARCH_TIMEOUT: float = 10.0
    INDEX_PREFIX: str = "quckapp"

    # Key-value store (cache, history, saved searches)
    REDIS_URL: str = "redis://localhost:6379/8"
    REDIS_SOCKET_TIMEOUT: float = 1.0

    # Search behaviour
    SEARCH_CACHE_TTL: int = 300  # 5 minutes
    DEFAULT_PER_PAGE: int = 20
    MAX_PER_PAGE: int = 100
    GLOBAL_MIN_PER_TYPE: int = 5
    EMOJI_PER_PAGE: int = 50
    SUGGEST_LIMIT: int = 10
    HISTORY_MAX_ENTRIES: int = 100

    # Application
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 5006
    WORKERS: int = 1
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    RATE_LIMIT_ENABLED: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "./data/logs/search.log"

    @field_validator("INDEX_PREFIX", mode="before")
    @classmethod
    def validate_index_prefix(cls, v):
        if not v or "_" in v or "*" in v:
            raise ValueError("INDEX_PREFIX must be non-empty and contain no '_' or '*'")
        return v

    @field_validator("MAX_PER_PAGE", mode="before")
    @classmethod
    def validate_max_per_page(cls, v):
        if int(v) < 1:
            raise ValueError("MAX_PER_PAGE must be >= 1")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()

# Configure logging
logger.remove()  # Remove default handler
logger.configure(patcher=add_correlation_id)
if settings.LOG_FILE:
    logger.add(
        settings.LOG_FILE,
        level=settings.LOG_LEVEL,
        rotation="10 MB",
        retention="30 days",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[correlation_id]} | {name}:{function}:{line} | {message}"
    )
logger.add(
    sys.stdout,
    level=settings.LOG_LEVEL,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | {extra[correlation_id]} | {message}"
)
