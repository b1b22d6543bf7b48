"""
FastAPI application for the Stagescope dashboard
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stagescope.config import is_dev_mode

from .router import router

logger = logging.getLogger(__name__)


class AppState:
    """Application state for managing SSE connections during shutdown."""

    def __init__(self) -> None:
        self.active_sse_connections: set[asyncio.Queue] = set()
        self.active_sse_tasks: set[asyncio.Task] = set()
        self.shutting_down = False


app_state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle.

    On shutdown, signal all active SSE connections to close gracefully.
    In development mode, forcefully cancel SSE tasks for fast restart.
    """
    yield

    app_state.shutting_down = True

    for queue in list(app_state.active_sse_connections):
        # Queue might already be closed or event loop shutting down
        with contextlib.suppress(RuntimeError, OSError):
            await queue.put(None)

    if is_dev_mode():
        logger.info(f"[DEV MODE] Cancelling {len(app_state.active_sse_tasks)} active SSE tasks")
        for task in list(app_state.active_sse_tasks):
            task.cancel()

        if app_state.active_sse_tasks:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(
                    asyncio.gather(*app_state.active_sse_tasks, return_exceptions=True),
                    timeout=0.1,
                )
    else:
        await asyncio.sleep(0.5)


app = FastAPI(
    title="Stagescope Dashboard",
    description="Executor metrics charts aligned with the job and stage timeline",
    docs_url="/docs/dashboard",
    redoc_url=None,
    lifespan=lifespan,
)

# Read-only API, so credentials stay disabled with wildcard origins
app.add_middleware(
    CORSMiddleware,  # ty: ignore[invalid-argument-type]
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["Content-Type"],
)

app.include_router(router)
