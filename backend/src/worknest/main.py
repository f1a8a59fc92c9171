# FastAPI application and its entry point
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import (
    auth_router,
    folders_router,
    health_router,
    notes_router,
    servers_router,
    user_router,
    workspace_router,
)
from .config import Settings, get_settings
from .core.exceptions import register_exception_handlers
from .core.logging import LoggingMiddleware, get_logger, setup_logging
from .core.schemas.common import HealthResponse
from .database import create_tables, dispose_engine

setup_logging()
logger = get_logger("main")

settings = get_settings()

ROUTERS = (
    health_router,
    auth_router,
    user_router,
    workspace_router,
    folders_router,
    notes_router,
    servers_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration, make sure the tables exist, release the pool on exit."""
    config: Settings = app.state.settings
    logger.info(
        "Starting Worknest",
        extra={"version": __version__, "environment": config.environment, "debug": config.debug},
    )

    # raises in production when the issuer or signing secret are defaults
    for warning in config.check_required():
        logger.warning(f"Configuration: {warning}")

    # tests run against their own in-memory engine
    if os.getenv("WORKNEST_SKIP_LIFESPAN_DB") == "1":
        logger.info("WORKNEST_SKIP_LIFESPAN_DB=1, not creating tables")
    else:
        try:
            await create_tables()
        except Exception as e:
            logger.error("Could not create database tables", exc_info=e)
            raise
        logger.info("Database tables ready")

    yield

    logger.info("Stopping Worknest")
    await dispose_engine()


def create_app(config: Settings = settings) -> FastAPI:
    application = FastAPI(
        title=config.app_name,
        description="Multi-tenant workspace API: folders, notes and registered servers",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.settings = config

    # CORS is added last so it wraps the logging middleware
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(application)

    for router in ROUTERS:
        application.include_router(router, prefix=config.api_prefix)

    # load balancers probe the bare path
    @application.get("/health", response_model=HealthResponse, tags=["health"])
    async def basic_health():
        return HealthResponse(ok=True)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("worknest.main:app", host=settings.host, port=settings.port, reload=settings.reload)
