import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi_utils.tasks import repeat_every

from .api import admin, inventory, purchases, reports, sales
from .config import get_settings
from .context import AppContext, create_context
from .core.logging import setup_logging
from .utils.cache_warmer import warm_state
from .utils.cleanup import cleanup_old_activity_logs

logger = logging.getLogger(__name__)


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the API; tests pass a ready context, production builds one on startup"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if context is None:
            setup_logging()
            app.state.context = await create_context()
            await warm_state(app.state.context)
        else:
            app.state.context = context

        settings = app.state.context.settings

        if settings.SYNC_POLL_SECONDS > 0:

            @repeat_every(seconds=settings.SYNC_POLL_SECONDS)
            async def poll_peer_changes() -> None:
                app.state.context.state.sync_from_peers()

            await poll_peer_changes()

        if settings.CLEANUP_INTERVAL_SECONDS > 0:

            @repeat_every(seconds=settings.CLEANUP_INTERVAL_SECONDS)
            async def cleanup_activity_logs() -> None:
                await cleanup_old_activity_logs(
                    app.state.context.store, days=settings.ACTIVITY_LOG_RETENTION_DAYS
                )

            await cleanup_activity_logs()

        yield

        app.state.context.redis.close()
        logger.info("Redis connection closed")

    app = FastAPI(title=get_settings().APP_NAME, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add response time header"""
        start_time = time.time()
        response = await call_next(request)
        response.headers["X-Process-Time"] = str(time.time() - start_time)
        return response

    @app.get("/")
    async def root():
        return {"message": "Lababil Sales System API"}

    @app.get("/health")
    async def health_check():
        ctx = app.state.context
        return {
            "status": "healthy",
            "cache": "up" if ctx.redis.ping() else "down",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(inventory.router)
    app.include_router(sales.router)
    app.include_router(purchases.router)
    app.include_router(reports.router)
    app.include_router(admin.router)
    return app


app = create_app()
