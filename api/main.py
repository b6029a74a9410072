"""FastAPI application factory with lifespan management."""

import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.routers import events, health, prometheus, stats
from config import Settings, configure_logging
from ingestion.service import IngestionService
from processor.dead_letter import DeadLetterQueue
from reporting.service import ReportingService
from storage.cache import ConsumerStatusCache
from storage.event_queue import EventQueue
from storage.event_store import EventStore
from storage.redis_client import RedisClient


def create_app(
    settings: Settings | None = None,
    redis_client: RedisClient | None = None,
    event_store: EventStore | None = None,
) -> FastAPI:
    """
    Build the ingestion + reporting API. Connections passed in are used as-is
    and left open on shutdown; the ones created here are closed with the app.
    """
    settings = settings or Settings()
    log = configure_logging("api", settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = []
        redis_ = redis_client
        if redis_ is None:
            redis_ = RedisClient(settings)
            owned.append(redis_)
        store = event_store
        if store is None:
            store = EventStore(settings)
            owned.append(store)

        queue = EventQueue(redis_, settings)
        app.state.settings = settings
        app.state.redis = redis_
        app.state.store = store
        app.state.queue = queue
        app.state.dead_letters = DeadLetterQueue(redis_, settings)
        app.state.consumer_status = ConsumerStatusCache(redis_, settings.consumer_state_key)
        app.state.ingestion = IngestionService(queue, settings)
        app.state.reporting = ReportingService(store, settings)
        app.state.start_time = time.time()
        log.info("api_started")

        try:
            yield
        finally:
            for resource in owned:
                resource.close()
            log.info("api_stopped")

    app = FastAPI(
        title="Site Analytics API",
        version="1.0.0",
        description="Event ingestion onto a durable queue and per-site traffic reporting",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(events.router)
    app.include_router(stats.router)
    app.include_router(health.router)
    app.include_router(prometheus.router)

    return app


def serve_ingestion():
    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.ingestion_port)


def serve_reporting():
    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.reporting_port)


app = create_app()
