"""
Dependency injection utilities for FastAPI.

This module provides reusable dependencies for database sessions,
the acting user, and the service layer.
"""

import logging
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from fastapi import Depends, HTTPException, Header, status

from api.config import settings
from services.product_service import ProductService
from services.storage_service import StorageService
from services.upload_product_service import UploadProductService

logger = logging.getLogger(__name__)


def _engine_kwargs() -> dict:
    # SQLite (local runs) does not accept pool sizing arguments
    if settings.DATABASE_URL.startswith('sqlite'):
        return {'connect_args': {'check_same_thread': False}}
    return {
        'pool_size': settings.DB_POOL_SIZE,
        'max_overflow': settings.DB_MAX_OVERFLOW,
        'pool_pre_ping': settings.DB_POOL_PRE_PING
    }


# Create database engine
engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG, **_engine_kwargs())

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields database session and ensures it's closed after use.

    Usage:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            # Use db session
            pass
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_api_key(
    x_api_key: str = Header(None, alias=settings.API_KEY_HEADER)
) -> str:
    """
    Validate API key from header.

    Args:
        x_api_key: API key from request header

    Returns:
        Validated API key

    Raises:
        HTTPException: If API key is invalid or missing
    """
    if not settings.ENABLE_API_KEY_AUTH:
        # API key auth disabled - allow all requests
        return "public"

    if not x_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    if x_api_key not in settings.API_KEYS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    return x_api_key


def get_current_user(api_key: str = Depends(get_api_key)) -> str:
    """
    Get the acting user name from the API key.

    Returns DEFAULT_USER when API key auth is disabled. The user name is
    recorded in product audit fields and the upload ledger.
    """
    if not settings.ENABLE_API_KEY_AUTH:
        return settings.DEFAULT_USER

    return settings.API_KEYS[api_key]


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    """Product service bound to the request's session."""
    return ProductService(db)


def get_upload_product_service(db: Session = Depends(get_db)) -> UploadProductService:
    """Upload service bound to the request's session."""
    return UploadProductService(
        db,
        StorageService(settings.UPLOADS_DIR),
        allowed_extensions=settings.ALLOWED_EXTENSIONS,
        max_file_size_mb=settings.MAX_FILE_SIZE_MB,
        reject_duplicates=settings.REJECT_DUPLICATE_UPLOADS
    )
