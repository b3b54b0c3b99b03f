"""
NetTap API - Main Application.

FastAPI application exposing tariff comparison, lead capture and lead
management. Every response uses the `{success, data, meta}` envelope; errors
use `{success: false, error: {message, code, statusCode, details}}`.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import __version__
from api.models import (
    ApiResponse,
    ConfigHealth,
    DatabaseHealth,
    ErrorBody,
    ErrorResponse,
    HealthData,
)
from core.config import Settings, load_settings
from core.logging_config import configure_logging
from domain.errors import AppError
from domain.time import utc_now
from repositories.container import RepositoryContainer, build_repositories
from services.auth_service import AuthService
from services.filter_service import FilterService
from services.lead_service import LeadNotifier, LeadService
from services.notification_service import build_notification_dispatcher
from services.tariff_service import TariffService

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[object] = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorBody(message=message, code=code, status_code=status_code, details=details)
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("Application error", extra={"path": request.url.path, "code": exc.code})
        return _error_response(exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())),
                "message": error.get("msg", ""),
                "type": error.get("type", ""),
            }
            for error in exc.errors()
        ]
        return _error_response(400, "VALIDATION_ERROR", "Validation failed", details)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "Unhandled error",
            extra={"path": request.url.path, "method": request.method},
            exc_info=exc,
        )
        return _error_response(500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred")


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[RepositoryContainer] = None,
    notifier: Optional[LeadNotifier] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted.
        container: Repositories to use instead of the configured backend.
        notifier: Lead notifier to use instead of the background dispatcher.

    Returns:
        The application. Services are wired when its lifespan starts.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        for problem in settings.validation_errors():
            logger.warning("Configuration problem: %s", problem)

        repositories = container or build_repositories(settings)
        dispatcher = None
        lead_notifier = notifier
        if lead_notifier is None:
            dispatcher = build_notification_dispatcher(settings)
            lead_notifier = dispatcher

        tariff_service = TariffService(repositories.tariffs, repositories.isps, repositories.districts)
        app.state.container = repositories
        app.state.tariff_service = tariff_service
        app.state.lead_service = LeadService(
            leads=repositories.leads,
            cities=repositories.cities,
            districts=repositories.districts,
            isps=repositories.isps,
            tariff_service=tariff_service,
            notifier=lead_notifier,
        )
        app.state.filter_service = FilterService(repositories.cities, repositories.districts)
        app.state.auth_service = AuthService(repositories.users, settings)

        logger.info(
            "API started",
            extra={"version": __version__, "env": settings.env, "backend": repositories.backend},
        )
        try:
            yield
        finally:
            if dispatcher is not None:
                dispatcher.shutdown(wait=True)
            logger.info("API stopped")

    app = FastAPI(
        title="NetTap API",
        description="Internet tariff comparison and lead distribution for Azerbaijani ISPs",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    origins = list(settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed requests against a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_exception_handlers(app)

    @app.get("/health", tags=["Health"], response_model=ApiResponse[HealthData])
    def health_check(request: Request):
        """
        Health check endpoint.

        Reports configuration validity and whether storage answers a trivial
        query. Responds 503 when either is failing.
        """
        repositories: RepositoryContainer = request.app.state.container
        try:
            repositories.cities.find_all()
            database_status = "connected"
        except Exception:
            logger.error("Health check storage probe failed", exc_info=True)
            database_status = "error"

        errors = settings.validation_errors()
        healthy = database_status == "connected" and not errors
        body = ApiResponse(
            success=healthy,
            data=HealthData(
                status="healthy" if healthy else "degraded",
                timestamp=utc_now(),
                version=__version__,
                environment=settings.env,
                database=DatabaseHealth(type=repositories.backend, status=database_status),
                config=ConfigHealth(valid=not errors, errors=errors),
            ),
        )
        return JSONResponse(
            status_code=200 if healthy else 503,
            content=body.model_dump(mode="json", by_alias=True),
        )

    @app.get("/", tags=["Root"])
    def root():
        """
        Root endpoint with API information.
        """
        return {
            "message": "NetTap API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    from api.routers import admin, auth, filters, isp, leads, tariffs

    app.include_router(tariffs.router, prefix="/api/v1", tags=["Tariffs"])
    app.include_router(leads.router, prefix="/api/v1", tags=["Leads"])
    app.include_router(admin.router, prefix="/api/v1", tags=["Admin"])
    app.include_router(isp.router, prefix="/api/v1", tags=["ISP"])
    app.include_router(auth.router, prefix="/api/v1", tags=["Auth"])
    app.include_router(filters.router, prefix="/api/v1", tags=["Filters"])

    return app


app = create_app()
