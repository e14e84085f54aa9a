from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load .env file before importing app modules
load_dotenv(override=True)

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.router import api_router
from app.config import Settings, get_settings
from app.exceptions import AcademicRecordsException
from app.services.factory import ServiceContainer, build_services
from app.utils.logger import configure_logger, get_logger

logger = get_logger(__name__)


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "success": False,
        "message": message,
        "error": {"code": code, "message": message},
    }
    if details:
        content["error"]["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _format_validation_errors(errors) -> list:
    return [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in errors
    ]


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(AcademicRecordsException)
    async def application_exception_handler(
        request: Request, exc: AcademicRecordsException
    ) -> JSONResponse:
        """Handle typed application errors raised by contracts, store and services."""
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "Application error",
            error_code=exc.error_code,
            message=exc.message,
            status_code=exc.status_code,
            details=exc.details,
            path=request.url.path,
            method=request.method,
        )
        details = exc.details if not settings.is_production else None
        return error_response(exc.status_code, exc.error_code, exc.message, details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed bodies or parameters are input errors, reported as 400."""
        logger.warning(
            "Request validation error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        return error_response(
            400,
            "VALIDATION_ERROR",
            "Input validation failed",
            {"validation_errors": _format_validation_errors(exc.errors())},
        )

    @app.exception_handler(PydanticValidationError)
    async def pydantic_validation_exception_handler(
        request: Request, exc: PydanticValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors raised while building payloads."""
        logger.warning(
            "Validation error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        return error_response(
            400,
            "VALIDATION_ERROR",
            "Input validation failed",
            {"validation_errors": _format_validation_errors(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP errors, including unknown routes."""
        logger.warning(
            "HTTP error",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path,
            method=request.method,
        )
        code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        return error_response(exc.status_code, code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Global exception handler for all unhandled exceptions."""
        logger.exception(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )
        return error_response(
            500,
            "INTERNAL_ERROR",
            "An unexpected error occurred. Please try again later.",
        )


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Explicit settings, read from the environment when omitted
        services: Prebuilt services, built from settings at startup when omitted
    """
    settings = settings or get_settings()
    configure_logger(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for FastAPI application."""
        logger.info("Starting up FastAPI application", environment=settings.ENVIRONMENT)
        app.state.services = services or build_services(settings)
        try:
            yield
        finally:
            logger.info("Shutting down FastAPI application")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )

    register_exception_handlers(app, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"])
    async def root_health():
        return {"status": "ok"}

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
