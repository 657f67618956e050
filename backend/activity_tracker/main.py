from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
import logging

from .core.clock import Clock
from .core.config import Settings, get_settings
from .core.logging_config import setup_logging
from .core.scheduler import APSchedulerTimer, schedule_stale_sweep, setup_scheduler, shutdown_scheduler
from .middleware import ErrorHandlerMiddleware, LoggingMiddleware
from .routers import activity_router, health_router, tracking_router
from .services.activity_service import ActivityService
from .services.mongodb import create_mongo_store
from .services.registry import TimerFactory, TrackerRegistry
from .services.store import ActivityStore, InMemoryActivityStore

logger = logging.getLogger(__name__)


async def _open_store(settings: Settings) -> ActivityStore:
    if settings.STORE_BACKEND == "memory":
        logger.warning("⚠️ Using in-memory activity store, data will not survive a restart")
        return InMemoryActivityStore()
    return await create_mongo_store()


def create_app(store: Optional[ActivityStore] = None, clock: Optional[Clock] = None,
               timer_factory: Optional[TimerFactory] = None,
               settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. Arguments override the configured store, clock and timers."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL)

        activity_store = store if store is not None else await _open_store(settings)

        scheduler = setup_scheduler()
        if not scheduler.running:
            scheduler.start()
            logger.info("✅ Scheduler started successfully")

        factory = timer_factory or (lambda job_id: APSchedulerTimer(scheduler, job_id))
        service = ActivityService(activity_store, clock=clock, settings=settings)
        app.state.activity_service = service
        registry = TrackerRegistry(service, factory, clock=clock, settings=settings)
        app.state.registry = registry
        schedule_stale_sweep(scheduler, registry.sweep_stale, settings.CHECKPOINT_INTERVAL_SECONDS)
        logger.info("Application startup complete")

        yield

        # Final flush for every open session before the store goes away
        await registry.stop_all()
        shutdown_scheduler()
        await activity_store.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Learning activity session tracking and weekly reporting",
        version=settings.APP_VERSION,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(health_router, prefix="/api/health", tags=["Health"])
    app.include_router(activity_router, prefix="/api/activity", tags=["Activity"])
    app.include_router(tracking_router, prefix="/api/tracking", tags=["Tracking"])

    @app.get("/api")
    async def root():
        """Root endpoint."""
        return {"status": "ok", "message": f"{settings.APP_NAME} API is running"}

    return app
