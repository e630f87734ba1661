"""
IndexDrift - Search Index Drift Detection
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application Info
    APP_NAME: str = "IndexDrift"
    APP_VERSION: str = "0.3.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Remote search service
    # Example: https://my-service.search.windows.net
    SEARCH_ENDPOINT: Optional[str] = None
    SEARCH_API_KEY: Optional[str] = None
    SEARCH_API_VERSION: str = "2023-11-01"
    REQUEST_TIMEOUT: float = 30.0  # seconds

    # Directory of <index-name>.json snapshots, used instead of the service when set
    SNAPSHOT_DIRECTORY: Optional[str] = None

    # Definitions directory for the watch command / API startup
    WATCH_DIRECTORY: Optional[str] = None

    # Nesting bound applied when building document trees
    MAX_DOCUMENT_DEPTH: int = 256

    # Maximum request body size in bytes (10MB default)
    MAX_REQUEST_SIZE: int = 10 * 1024 * 1024

    # CORS - comma-separated list of allowed origins, or "*" for all
    CORS_ORIGINS: str = "*"

    class Config:
        env_prefix = "INDEXDRIFT_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
