"""
FastAPI application for the Storefront data API.

Products, customers and orders are each stored in the relational database
or in Azure Cosmos DB, as chosen by the STORAGE_* settings.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Type

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import AppSettings, get_settings
from .domain.exceptions import (
    BackendUnavailableException,
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidStateTransitionException,
    ValidationException,
)
from .infrastructure.cosmos.client import CosmosManager
from .infrastructure.database import connection
from .infrastructure.repository_factory import cosmos_containers
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

# Most specific class wins; anything else derived from DomainException is a 400
ERROR_STATUS: Dict[Type[DomainException], int] = {
    DomainException: status.HTTP_400_BAD_REQUEST,
    EntityNotFoundException: status.HTTP_404_NOT_FOUND,
    ValidationException: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DuplicateEntityException: status.HTTP_409_CONFLICT,
    InvalidStateTransitionException: status.HTTP_409_CONFLICT,
    BackendUnavailableException: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Prepare whichever stores are in use, and release them on shutdown."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.environment})")

    if settings.storage.uses_sql:
        try:
            await connection.init_db()
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    if settings.storage.uses_cosmos:
        await CosmosManager.initialize(cosmos_containers(settings))
        logger.info("Cosmos DB containers ready")

    yield

    logger.info("Shutting down")
    await connection.DatabaseManager.close()
    await CosmosManager.close()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    docs_enabled = settings.debug
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Products, customers and orders over Cosmos DB or SQL",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=settings.cors.allowed_headers,
    )

    register_exception_handlers(app)
    register_routes(app, settings)
    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Map storefront errors to HTTP responses carrying their to_dict() body."""

    async def domain_error(request: Request, exc: DomainException) -> JSONResponse:
        status_code = next(ERROR_STATUS[c] for c in type(exc).__mro__ if c in ERROR_STATUS)
        if status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
            logger.error(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    for exc_class in ERROR_STATUS:
        app.add_exception_handler(exc_class, domain_error)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        body = {'error': 'INTERNAL_ERROR', 'message': 'An internal error occurred'}
        if get_settings().debug:
            body.update(message=str(exc), type=type(exc).__name__)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


def register_routes(app: FastAPI, settings: AppSettings) -> None:

    @app.get("/health", tags=["Health"])
    async def health():
        """Report reachability of every store the configuration uses."""
        services = {}
        if settings.storage.uses_sql:
            services['database'] = 'up' if await connection.health_check() else 'down'
        if settings.storage.uses_cosmos:
            services['cosmos'] = 'up' if await CosmosManager.health_check() else 'down'

        return {
            'status': 'healthy' if all(s == 'up' for s in services.values()) else 'degraded',
            'services': services,
            'version': settings.app_version,
            'environment': settings.environment,
        }

    @app.get("/", tags=["Root"])
    async def root():
        return {
            'name': settings.app_name,
            'version': settings.app_version,
            'api_docs': '/docs' if settings.debug else None,
        }

    from .api.v1 import api_router

    api = APIRouter(prefix=settings.api_prefix)
    api.include_router(api_router)
    app.include_router(api)


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        workers=settings.workers,
    )
