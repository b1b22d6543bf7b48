"""
Response models for the dashboard API.
"""

from pydantic import BaseModel

from stagescope.catalog import AppInfo

__all__ = ["AppInfo", "AppsResponse", "MetricPathsResponse"]


class AppsResponse(BaseModel):
    """Applications list response model"""

    apps: list[AppInfo]


class MetricPathsResponse(BaseModel):
    """Selectable metric paths of one application"""

    app: str
    paths: list[str]
    tooltips: dict[str, str] = {}
