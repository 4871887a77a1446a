"""FastAPI main application with app factory and route configuration."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .deps import get_settings
from .models.task import format_timestamp, utc_now
from .routes import tasks
from .schemas import ErrorResponse, HealthResponse
from .services.task_service import TaskService
from .store.task_store import TaskStore
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the task store on startup and close it on shutdown.

    Args:
        app: FastAPI application instance
    """
    settings: Settings = app.state.settings

    setup_logging(settings)
    logger.info("Starting up Task Tracker application")

    store = TaskStore(settings.database_path)
    try:
        await store.connect()
    except Exception as e:
        logger.error(f"Error during application startup: {str(e)}")
        raise

    app.state.task_store = store
    app.state.task_service = TaskService(store)
    logger.info("Application startup completed successfully")

    try:
        yield
    finally:
        logger.info("Shutting down Task Tracker application")
        app.state.task_service = None
        app.state.task_store = None
        await store.close()
        logger.info("Application shutdown completed successfully")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use; read from the environment when omitted

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Task Tracker",
        description="A single-user task tracker backed by SQLite",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.task_store = None
    app.state.task_service = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests."""
        logger.info(f"Request: {request.method} {request.url}")

        response = await call_next(request)

        logger.info(
            f"Response: {response.status_code} for {request.method} {request.url}"
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with proper logging."""
        logger.warning(
            f"HTTP {exc.status_code}: {exc.detail} for {request.method} {request.url}"
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                status_code=exc.status_code,
                path=str(request.url),
            ).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Answer malformed request bodies with 400 and the validation details."""
        logger.warning(
            f"Validation error for {request.method} {request.url}: {exc.errors()}"
        )

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                **ErrorResponse(
                    error="Validation error",
                    status_code=status.HTTP_400_BAD_REQUEST,
                    path=str(request.url),
                ).model_dump(),
                "details": jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(
            f"Unexpected error for {request.method} {request.url}: {str(exc)}",
            exc_info=True,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="Internal server error",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                path=str(request.url),
            ).model_dump(),
        )

    @app.get("/healthz", tags=["health"], response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint for monitoring.

        Returns:
            Health status information
        """
        store: Optional[TaskStore] = request.app.state.task_store
        service_ready = request.app.state.task_service is not None

        try:
            task_count = await store.count() if store is not None else None
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "status": "unhealthy",
                    "error": str(e),
                    "timestamp": format_timestamp(utc_now()),
                },
            )

        health_status = {
            "status": "healthy",
            "timestamp": format_timestamp(utc_now()),
            "version": VERSION,
            "services": {
                "task_store": "connected" if task_count is not None else "not_connected",
                "task_service": "initialized" if service_ready else "not_initialized",
            },
            "task_count": task_count,
        }

        if task_count is None or not service_ready:
            health_status["status"] = "degraded"

        return HealthResponse(**health_status)

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Task Tracker API",
            "version": VERSION,
            "docs_url": "/docs",
            "health_check": "/healthz",
            "endpoints": {
                "tasks": "/api/tasks",
            },
        }

    app.include_router(tasks.router, prefix="/api")

    logger.info("FastAPI application created and configured")

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors reduced to JSON-safe location/message pairs."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
