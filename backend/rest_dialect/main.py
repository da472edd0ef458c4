"""rest-dialect Demo API: FastAPI application serving a sample "thing" resource.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers keep every response in the dialect's JSON envelope
    - CORS configured from settings (not hardcoded)
    - Logging configured once on startup via lifespan

Design Decisions:
    - One PersistableSampleRepository shared by all requests: the sample keeps
      its records in memory and guards them itself
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rest_dialect.api import handlers, health
from rest_dialect.api.error_handlers import register_error_handlers
from rest_dialect.config import get_settings
from rest_dialect.examples.sample_repository import (
    PersistableSampleRepository, SampleModel,
)
from rest_dialect.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)

things = PersistableSampleRepository()


def new_thing_repository(request) -> PersistableSampleRepository:
    return things


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    handler = setup_logging(settings.log_level, settings.log_format)
    logger.info("rest-dialect demo API started")
    yield
    logger.info("rest-dialect demo API shutting down")
    logging.root.removeHandler(handler)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="rest-dialect demo", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.total_count_header],
    )

    resources = APIRouter(prefix="/api/v1", tags=["thing"])
    handlers.register_resource(
        resources, "/thing", new_thing_repository, SampleModel,
        entity_name="thing", settings=settings,
    )

    app.include_router(health.router)
    app.include_router(resources)
    register_error_handlers(app)
    return app


app = create_app()
