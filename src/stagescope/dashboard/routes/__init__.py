"""
Stagescope dashboard routes.

This package contains route handlers organized by type:
- api_routes: REST API endpoints
- sse_routes: Server-Sent Events streaming endpoints
"""

from .api_routes import router as api_router
from .sse_routes import router as sse_router

__all__ = ["api_router", "sse_router"]
