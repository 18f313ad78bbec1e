"""FastAPI application factory.

Usage:
    ```python
    from mdd_rest.api.app import create_app

    app = create_app(models=[Author, Book])
    ```
"""

import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from mdd_rest.config import Settings
from mdd_rest.config import settings as default_settings
from mdd_rest.database import create_db_engine, create_session_factory, ping
from mdd_rest.dto import ApiInfoResponse, HealthCheckResponse, ResourceSummary
from mdd_rest.exceptions import MddRestError
from mdd_rest.logging_config import setup_logging
from mdd_rest.registry import ModelInfoRegistry
from mdd_rest.services import ServiceContext

from .router import build_model_router

logger = logging.getLogger(__name__)

API_TITLE = "MDD REST API"
API_VERSION = "0.1.0"
API_DESCRIPTION = "Model driven REST services generated from SQLAlchemy models"


def create_app(
    models: Sequence[type] | None = None,
    settings: Settings | None = None,
    session_factory: sessionmaker[Session] | None = None,
    *,
    base: type[DeclarativeBase] | None = None,
    engine: Engine | None = None,
) -> FastAPI:
    """Create the application serving the given resource models.

    The registry is populated and one router per model is mounted right
    away; database resources are set up in the lifespan.

    Args:
        models: Model classes to expose
        settings: Application settings. Defaults to the environment.
        session_factory: Session factory to use instead of one created from
            the configured database URL
        base: Declarative base whose ``@scrud_resource`` classes are exposed
            as well
        engine: Engine to use instead of one created from settings

    Returns:
        The configured FastAPI application

    Raises:
        ModelRegistrationError: If a model cannot be exposed
    """
    app_settings = settings or default_settings
    registry = ModelInfoRegistry.create(list(models or []), base_path=app_settings.api_base_path)
    if base is not None:
        registry.register_all(base)
    context = ServiceContext.create(registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize logging and the database, and store them in app.state."""
        setup_logging(app_settings.log_level, app_settings.log_format)

        owns_engine = engine is None and session_factory is None
        if engine is not None:
            db_engine = engine
        elif session_factory is not None:
            db_engine = session_factory.kw["bind"]
        else:
            db_engine = create_db_engine(app_settings.database_url, app_settings.database_echo)

        if app_settings.database_create_all:
            metadatas = {id(info.model_type.metadata): info.model_type.metadata for info in registry.entries()}
            for metadata in metadatas.values():
                metadata.create_all(db_engine)

        app.state.engine = db_engine
        app.state.session_factory = session_factory or create_session_factory(db_engine)

        logger.info(f"✓ Serving {len(registry.exposed_entries())} resource models under {registry.base_path}")
        logger.info(f"✓ Database healthy: {ping(db_engine)}")

        yield

        del app.state.session_factory
        del app.state.engine
        if owns_engine:
            db_engine.dispose()
        logger.info("✓ MDD REST API shut down")

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.service_context = context

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=[app_settings.cors_allowed_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MddRestError)
    async def handle_framework_error(request: Request, exc: MddRestError) -> JSONResponse:
        logger.info(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path} violated a constraint: {exc.orig}")
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": f"Conflict: {exc.orig}"})

    @app.get("/", response_model=ApiInfoResponse)
    async def root() -> ApiInfoResponse:
        """Root endpoint with API information."""
        return ApiInfoResponse(
            name=API_TITLE,
            version=API_VERSION,
            description=API_DESCRIPTION,
            resources=[
                ResourceSummary(name=info.api_name, path=info.request_mapping, json_api_type=info.json_api_type)
                for info in registry.exposed_entries()
            ],
        )

    @app.get("/health", response_model=HealthCheckResponse)
    def health(request: Request) -> HealthCheckResponse:
        """Health check endpoint."""
        database_healthy = ping(request.app.state.engine)
        if not database_healthy:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Database connection failed",
            )
        return HealthCheckResponse(status="healthy", database_healthy=True, resources=len(registry.exposed_entries()))

    for model_info in registry.exposed_entries():
        app.include_router(build_model_router(model_info))
        logger.debug(f"Mounted {model_info.model_name} at {model_info.request_mapping}")

    return app
