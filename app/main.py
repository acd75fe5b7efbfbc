from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from fastapi import FastAPI
from .clients.tmdb_client import TMDBClient
from .config import Settings, get_settings
from .middleware import (
    PreflightMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_error_handlers,
)
from .routers import media, search
from .schemas.search_schemas import HealthResponse
from .utils.logging import configure_logging, get_logger

SERVICE_NAME = 'media-search-gateway'
VERSION = '1.0.0'
API_PREFIX = '/api/v1'

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[TMDBClient] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    :param settings: configuration; read from the environment when omitted.
    :param gateway: TMDB client to use. When omitted one is created at
        startup from ``settings`` and closed at shutdown.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, json_output=settings.is_production)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_gateway = app.state.gateway is None
        if owns_gateway:
            app.state.gateway = TMDBClient(settings)
        logger.info('gateway_started', env=settings.ENV,
                    base_url=settings.TMDB_BASE_URL)
        yield
        if owns_gateway:
            await app.state.gateway.aclose()
            app.state.gateway = None
        logger.info('gateway_stopped')

    app = FastAPI(
        title='Media Search Gateway',
        description='Uniform search and lookup over TMDB',
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.gateway = gateway

    app.add_middleware(PreflightMiddleware)
    configure_cors(app, settings.cors_origins)
    app.add_middleware(RequestLoggingMiddleware)
    register_error_handlers(app)

    @app.get(f"{API_PREFIX}/health", response_model=HealthResponse, tags=['system'])
    async def health() -> HealthResponse:
        return HealthResponse(
            status='healthy',
            service=SERVICE_NAME,
            version=VERSION,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    app.include_router(search.router, prefix=API_PREFIX)
    app.include_router(media.router, prefix=API_PREFIX)
    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        'app.main:create_app',
        factory=True,
        host='0.0.0.0',
        port=settings.PORT,
        log_config=None,
    )


if __name__ == '__main__':
    run()
