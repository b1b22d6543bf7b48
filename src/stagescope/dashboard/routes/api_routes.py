"""
REST API routes for the Stagescope dashboard.

This module handles:
- Application listing
- Metric path discovery
- Historical chart payloads (JSON or MessagePack)
"""

from __future__ import annotations

import asyncio
import logging

import msgpack
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse, Response

from stagescope.catalog import AppCatalog
from stagescope.exceptions import AppNotFoundError
from stagescope.presenter import BatchPresenter

from ..dependencies import AppCatalogDep, ValidatedApp
from ..models import AppsResponse, MetricPathsResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_presenter(catalog: AppCatalog, app: str) -> BatchPresenter:
    """Load samples, timeline and tooltips of an application into a batch presenter."""
    timeline = catalog.load_timeline(app)
    return BatchPresenter(
        catalog.load_samples(app),
        stages=timeline.stages,
        jobs=timeline.jobs,
        tooltips=catalog.load_tooltips(app),
    )


async def _get_presenter(catalog: AppCatalog, app: str) -> BatchPresenter:
    try:
        return await asyncio.to_thread(_load_presenter, catalog, app)
    except AppNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.get("/api/apps")
async def list_apps(app_catalog: AppCatalogDep) -> AppsResponse:
    """List applications with collector output, most recently updated first."""
    apps = await asyncio.to_thread(app_catalog.get_apps)
    return AppsResponse(apps=apps)


@router.get("/api/apps/{app}/metric-paths")
async def get_metric_paths(app: ValidatedApp, app_catalog: AppCatalogDep) -> MetricPathsResponse:
    """Get the selectable metric paths of an application.

    Paths are discovered from the first sample and sorted alphabetically.

    Raises:
        HTTPException: 400 if the application id is invalid, 404 if it does not exist.
    """
    presenter = await _get_presenter(app_catalog, app)
    return MetricPathsResponse(app=app, paths=presenter.metric_paths, tooltips=presenter.tooltips)


@router.get("/api/apps/{app}/chart")
async def get_chart(
    app: ValidatedApp,
    app_catalog: AppCatalogDep,
    path: str | None = Query(default=None, description="Dot-joined metric path; omit for an empty chart"),
    format: str = "json",
) -> Response:
    """Get the chart payload of one metric path over the application's history.

    Args:
        app: Application id.
        path: Selected metric path.
        format: Response format - "json" (default) or "msgpack".

    Returns:
        ChartPayload as JSON, or as MessagePack with application/x-msgpack content type.

    Raises:
        HTTPException: 400 if the application id or format is invalid, 404 if the application does not exist.
    """
    if format not in ("json", "msgpack"):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid format: {format}. Must be 'json' or 'msgpack'",
        )

    presenter = await _get_presenter(app_catalog, app)
    payload = presenter.render(path)
    response_data = payload.model_dump(mode="json")

    if format == "msgpack":
        packed_data = msgpack.packb(response_data)
        return Response(content=packed_data, media_type="application/x-msgpack")

    return JSONResponse(content=response_data)
