"""
Project Catalog

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional, Type

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.api.middleware.request_id import RequestIdMiddleware
from catalog.api.v1 import router as api_v1_router
from catalog.config import Settings, get_settings
from catalog.database import close_db, create_engine_for, create_session_factory, init_db
from catalog.kernel.errors import (
    CatalogError,
    InvalidSupervisorError,
    MissingSupervisorError,
    NotFoundError,
    PermissionDeniedError,
    UnauthorizedTransitionError,
)
from catalog.logging_config import configure_logging, get_logger
from catalog.notifications.hub import NotificationHub
from catalog.schemas.common import HealthResponse

logger = get_logger(__name__)


# Most specific class first; CatalogError itself is the fallback
_ERROR_STATUS: Dict[Type[CatalogError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedTransitionError: status.HTTP_403_FORBIDDEN,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    InvalidSupervisorError: status.HTTP_400_BAD_REQUEST,
    MissingSupervisorError: status.HTTP_400_BAD_REQUEST,
}


def status_for(exc: CatalogError) -> int:
    """HTTP status for a domain error."""
    for error_type, code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Starts the notification bus after the database is ready and drains it
    before connections close.
    """
    settings: Settings = app.state.settings
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db(app.state.engine)
    logger.info("Database initialized")
    await app.state.hub.start()

    yield

    logger.info("Shutting down...")
    await app.state.hub.stop()
    if app.state.owns_engine:
        await close_db(app.state.engine)
        logger.info("Database connections closed")


def _with_request_id(request: Request, content: dict) -> tuple[dict, dict]:
    headers = {}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers["X-Request-ID"] = req_id
        content["request_id"] = req_id
    return content, headers


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> FastAPI:
    """
    Build the application.

    The hub is constructed here and started by the lifespan, so tests that
    drive the app without a lifespan can start it themselves.
    """
    settings = settings or get_settings()
    owns_engine = session_factory is None
    if owns_engine:
        engine = create_engine_for(settings.database_url, echo=settings.debug)
        session_factory = create_session_factory(engine)
    else:
        # An injected factory stays bound to its caller's engine
        engine = session_factory.kw["bind"]

    app = FastAPI(
        title=settings.project_name,
        description="""
    Project Catalog

    Academic project catalog with a supervisor approval workflow.

    ## Features

    - **Projects**: Submit projects for supervisor approval; admins publish directly
    - **Review**: Supervisors approve or reject, with an optional reason
    - **Collaboration**: Comments and reactions on projects
    - **Notifications**: Persistent inbox plus live push over WebSocket
    """,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.owns_engine = owns_engine
    app.state.session_factory = session_factory
    app.state.hub = NotificationHub.from_settings(settings, session_factory)

    # add_middleware stacks innermost-first, so CORS (added last) wraps everything
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        """Translate domain errors raised by services."""
        content, headers = _with_request_id(
            request, {"detail": exc.message, "code": type(exc).__name__}
        )
        return JSONResponse(status_code=status_for(exc), content=content, headers=headers)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        content, headers = _with_request_id(request, {"detail": exc.detail})
        if exc.headers:
            headers.update(exc.headers)
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"],
            })
        content, headers = _with_request_id(
            request, {"detail": "Validation error", "errors": errors}
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=content,
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception: %s", exc)
        if settings.debug:
            body = {"detail": str(exc), "type": type(exc).__name__}
        else:
            body = {"detail": "Internal server error"}
        content, headers = _with_request_id(request, body)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
            headers=headers,
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Check application health."""
        hub: NotificationHub = app.state.hub
        return HealthResponse(
            status="ok",
            version=settings.version,
            database="connected",
            live_sessions=len(hub.registry),
            event_bus_running=hub.bus.is_running,
        )

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": "/docs" if settings.debug else "disabled",
            "api": {
                "v1": settings.api_v1_prefix,
            },
        }

    app.include_router(api_v1_router, prefix=settings.api_v1_prefix)
    return app


app = create_app()


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "catalog.main:app",
        host="0.0.0.0",
        port=8000,
        reload=_settings.debug,
    )
