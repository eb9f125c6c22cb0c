"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from app.api.routes import health, recipes
from app.config import settings
from app.core.request_id import get_request_id
from app.db.database import init_db
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import get_rate_limit_exceeded_handler, limiter
from app.middleware.security import SecurityHeadersMiddleware, setup_cors
from app.utils.exceptions import (
    AmugonnaException,
    AuthenticationError,
    InvalidRequestError,
    PersistenceError,
    RecipeNotFoundError,
)
from app.utils.logging_config import setup_logging

# Setup logging
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Amugonna API",
    description="Pantry-based recipe generation with Gemini and a deterministic fallback",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, get_rate_limit_exceeded_handler())


def _error_body(error: str, detail, request_id: str) -> dict:
    return {"success": False, "error": error, "detail": detail, "request_id": request_id}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors with detailed messages."""
    request_id = get_request_id()
    logger.warning(
        "Validation error: %s",
        exc,
        extra={"path": request.url.path, "method": request.method, "errors": exc.errors()},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body("Validation error", jsonable_encoder(exc.errors()), request_id),
    )


@app.exception_handler(AmugonnaException)
async def amugonna_exception_handler(request: Request, exc: AmugonnaException) -> JSONResponse:
    """Map application exceptions to HTTP responses."""
    request_id = get_request_id()

    if isinstance(exc, AuthenticationError):
        status_code = status.HTTP_401_UNAUTHORIZED
        error_message = "Authentication failed"
    elif isinstance(exc, InvalidRequestError):
        status_code = status.HTTP_400_BAD_REQUEST
        error_message = "Invalid request"
    elif isinstance(exc, RecipeNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
        error_message = "Recipe not found"
    elif isinstance(exc, PersistenceError):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        error_message = "Failed to generate recipe"
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        error_message = "Internal server error"

    if status_code >= 500:
        logger.error("Exception: %s", error_message, extra={"exception": str(exc)}, exc_info=exc)
    else:
        logger.info("Request rejected: %s", error_message, extra={"exception": str(exc)})

    return JSONResponse(status_code=status_code, content=_error_body(error_message, str(exc), request_id))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = get_request_id()
    logger.error("Unexpected exception: %s", exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", "An unexpected error occurred", request_id),
    )


# Add middleware (order matters!)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
setup_cors(app)

app.include_router(health.router)
app.include_router(recipes.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event."""
    init_db()
    logger.info("Amugonna API starting up...")
    logger.info("Log level: %s", settings.log_level)
    logger.info("Generation model: %s", settings.gemini_model)
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; every recipe will use the fallback template")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event."""
    logger.info("Amugonna API shutting down...")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Amugonna API",
        "version": "1.0.0",
        "docs": "/docs",
    }
