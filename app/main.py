"""FastAPI application entry point.

Main application setup with middleware, routing, and lifecycle management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import labels_router, message_templates_router, profile_router, whatsapp_router
from app.api.schemas import ErrorResponse, ValidationErrorResponse
from app.api.validation import translate_errors
from app.core.config import Settings, get_settings
from app.core.factory import get_factory
from app.core.logging_config import setup_logging
from app.db.session import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events for proper resource management.
    """
    settings: Settings = app.state.settings

    # Startup
    setup_logging()
    logger.info("Starting Mensageria API...")

    if settings.create_tables_on_startup:
        try:
            logger.info("Creating missing database tables...")
            await init_db(settings)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise

    yield

    # Shutdown
    logger.info("Shutting down Mensageria API...")

    try:
        await get_factory().aclose()
        await close_db(settings)
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}", exc_info=True)


def _validation_body(messages: list[str], status_code: int, message: str | None = None) -> dict:
    response = ValidationErrorResponse(errors=messages, statusCode=status_code)
    if message:
        response.message = message
    return response.model_dump()


def register_exception_handlers(app: FastAPI) -> None:
    """Install the Laravel compatible error responses."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with Portuguese messages."""
        messages = translate_errors(exc.errors())
        logger.warning(f"Validation error on {request.url.path}: {messages}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_validation_body(messages, status.HTTP_422_UNPROCESSABLE_ENTITY),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Render HTTP errors; 400s use the validation shape."""
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        if exc.status_code == status.HTTP_400_BAD_REQUEST:
            content = _validation_body([detail], exc.status_code, message=detail)
        else:
            content = {"message": detail, "statusCode": exc.status_code}
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                message="Erro interno do servidor.",
                statusCode=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error_code="INTERNAL_ERROR",
            ).model_dump(),
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Mensageria API",
        description="WhatsApp messaging backend: labels, message templates and instances",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Store settings in app state
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in (labels_router, message_templates_router, profile_router, whatsapp_router):
        app.include_router(router)
        logger.info(f"Registered router {router.prefix}")

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        return {
            "status": "healthy",
            "service": "mensageria-api",
            "version": "0.1.0",
        }

    register_exception_handlers(app)

    logger.info("FastAPI application created successfully")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Starting uvicorn server on port 8000...")
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
