"""
Server-Sent Events (SSE) routes for the Stagescope dashboard.

This module handles the live chart stream of one application. Each
connection owns its own LivePresenter; samples from the watcher are folded
into it one at a time and every re-derived payload is pushed to the client.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Coroutine
from contextlib import suppress
from typing import Any, cast

from fastapi import APIRouter, Query
from sse_starlette.sse import EventSourceResponse

from stagescope.config import is_dev_mode
from stagescope.exceptions import AppNotFoundError
from stagescope.models import MetricSample
from stagescope.presenter import LivePresenter

from ..dependencies import AppCatalogDep, ValidatedApp

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/apps/{app}/stream")
async def stream_app_chart(
    app: ValidatedApp,
    app_catalog: AppCatalogDep,
    path: str | None = Query(default=None, description="Dot-joined metric path to chart"),
) -> EventSourceResponse:
    """Stream live chart payloads of an application using Server-Sent Events (SSE).

    Args:
        app: Application id.
        path: Selected metric path. Without it only the `paths` event is sent.

    Returns:
        EventSourceResponse with event types:
        - `paths`: JSON list of selectable metric paths, sent once after the first sample
        - `chart`: ChartPayload JSON, sent after every sample while a path is selected
        - `error`: error message
    """
    logger.info(f"[SSE ENDPOINT] Called with app={app}, path={path}")

    from ..main import app_state

    try:
        timeline = app_catalog.load_timeline(app)
        tooltips = app_catalog.load_tooltips(app)
    except AppNotFoundError as e:
        not_found_msg = str(e)

        async def not_found_error_generator():
            yield {"event": "error", "data": not_found_msg}

        return EventSourceResponse(not_found_error_generator())

    presenter = LivePresenter(stages=timeline.stages, jobs=timeline.jobs, tooltips=tooltips)
    if path:
        presenter.select(path)

    async def event_generator():
        logger.info(f"[SSE] event_generator started for app={app}")

        current_task = asyncio.current_task()
        if current_task is not None:
            app_state.active_sse_tasks.add(current_task)

        shutdown_queue: asyncio.Queue[None] = asyncio.Queue()
        app_state.active_sse_connections.add(shutdown_queue)

        samples_iterator = app_catalog.subscribe(app).__aiter__()

        dev_mode = is_dev_mode()
        wait_timeout = 1.0 if dev_mode else None

        # Cancelling a task awaiting inside an async generator closes the
        # generator, so the pending sample task is kept across timeouts.
        pending_sample_task: asyncio.Task[MetricSample] | None = None
        paths_sent = False

        try:
            while True:
                if dev_mode and app_state.shutting_down:
                    logger.info("[SSE] Dev mode: shutdown flag detected")
                    break

                if pending_sample_task is None:
                    sample_coro = cast("Coroutine[Any, Any, MetricSample]", samples_iterator.__anext__())
                    pending_sample_task = asyncio.create_task(sample_coro, name="sample_task")

                shutdown_coro = cast("Coroutine[Any, Any, Any]", shutdown_queue.get())
                shutdown_task = asyncio.create_task(shutdown_coro, name="shutdown_task")

                done, _pending = await asyncio.wait(
                    [pending_sample_task, shutdown_task],
                    return_when=asyncio.FIRST_COMPLETED,
                    timeout=wait_timeout,
                )

                if shutdown_task not in done:
                    shutdown_task.cancel()
                    with suppress(asyncio.CancelledError):
                        await shutdown_task

                if not done:
                    continue

                if shutdown_task in done:
                    logger.info("[SSE] Shutdown requested")
                    break

                completed_task = pending_sample_task
                pending_sample_task = None
                try:
                    sample = completed_task.result()
                except StopAsyncIteration:
                    logger.info("[SSE] No more samples (StopAsyncIteration)")
                    break

                payload = presenter.push(sample)
                if not paths_sent:
                    paths_sent = True
                    yield {"event": "paths", "data": json.dumps(presenter.metric_paths)}
                if payload is not None:
                    logger.debug(f"[SSE] Sending chart to client: app={app}, hosts={len(payload.legend)}")
                    yield {"event": "chart", "data": payload.model_dump_json()}

        except asyncio.CancelledError:
            logger.info("[SSE] Generator cancelled")
            raise
        except Exception as e:
            logger.error(f"[SSE] Exception in event_generator: {e}", exc_info=True)
            yield {"event": "error", "data": str(e)}
        finally:
            logger.info("[SSE] event_generator finished, cleaning up")
            app_state.active_sse_connections.discard(shutdown_queue)
            if current_task is not None:
                app_state.active_sse_tasks.discard(current_task)
            if pending_sample_task is not None and not pending_sample_task.done():
                pending_sample_task.cancel()
                with suppress(asyncio.CancelledError, StopAsyncIteration):
                    await pending_sample_task
            try:
                await asyncio.wait_for(samples_iterator.aclose(), timeout=1.0)
            except asyncio.TimeoutError:
                logger.warning("[SSE] Timeout closing samples_iterator")
            except Exception as e:
                logger.warning(f"[SSE] Error closing samples_iterator: {e}")

    return EventSourceResponse(event_generator())
