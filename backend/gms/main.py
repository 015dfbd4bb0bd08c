import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gms.api.v1 import api_router
from gms.config import settings
from gms.core.error_handlers import register_error_handlers
from gms.core.logging import configure_logging
from gms.core.middleware import RequestIDMiddleware
from gms.services.runtime import SyncRuntime, build_runtime

logger = logging.getLogger(__name__)


def create_app(runtime_factory: Callable[[], SyncRuntime] | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        runtime = runtime_factory() if runtime_factory else build_runtime(settings)
        app.state.sync_runtime = runtime
        logger.info(
            "Starting %s %s (remote=%s, queue storage=%s, %d pending)",
            settings.APP_NAME,
            settings.APP_VERSION,
            settings.REMOTE_BACKEND,
            settings.QUEUE_STORAGE_BACKEND,
            runtime.queue.pending_count,
        )
        await runtime.start()
        yield
        # Shutdown: stop probing and release connections
        await runtime.stop()
        if runtime_factory is None and settings.REMOTE_BACKEND == "database":
            from gms.database import engine

            await engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # --- Middleware (outermost first) ---
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    # --- Error handlers ---
    register_error_handlers(app)

    # --- Routes ---
    app.include_router(api_router)

    @app.get("/api/health")
    async def health_check():
        """Liveness plus the numbers the offline indicator shows."""
        runtime: SyncRuntime = app.state.sync_runtime
        return {
            "status": "ok",
            "version": settings.APP_VERSION,
            "online": runtime.monitor.is_online,
            "pending_count": runtime.queue.pending_count,
        }

    return app


app = create_app()
