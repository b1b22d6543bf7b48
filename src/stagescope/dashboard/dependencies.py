"""
FastAPI dependency injection for the Stagescope dashboard.

This module provides reusable dependencies for:
- AppCatalog instance management
- Path parameter validation (application ids)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException
from fastapi import Path as PathParam

from stagescope.catalog import AppCatalog
from stagescope.config import get_data_dir
from stagescope.utils import validators

# Mutable container for custom data directory configuration
_custom_data_dir: list[str | None] = [None]


@lru_cache(maxsize=1)
def _get_cached_catalog() -> AppCatalog:
    """Get the cached catalog instance."""
    if _custom_data_dir[0] is not None:
        data_dir = Path(_custom_data_dir[0])
    else:
        data_dir = get_data_dir()
    return AppCatalog(data_dir)


def get_app_catalog() -> AppCatalog:
    """Get the AppCatalog singleton instance."""
    return _get_cached_catalog()


def configure_data_dir(data_dir: str | None = None) -> None:
    """Configure data directory and reinitialize the catalog.

    Args:
        data_dir: Custom data directory path. If None, uses default.
    """
    _get_cached_catalog.cache_clear()
    _custom_data_dir[0] = data_dir


def get_validated_app(app: Annotated[str, PathParam(description="Application id")]) -> str:
    """Validate application id path parameter.

    Raises:
        HTTPException: 400 if the application id is invalid.
    """
    try:
        validators.validate_app_name(app)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return app


# Type aliases for dependency injection
ValidatedApp = Annotated[str, Depends(get_validated_app)]
AppCatalogDep = Annotated[AppCatalog, Depends(get_app_catalog)]
