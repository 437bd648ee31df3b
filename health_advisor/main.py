import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from health_advisor.api import advice
from health_advisor.config import settings
from health_advisor.services.advice_service import (
    ConfigurationError,
    RateLimitExceededError,
    utc_timestamp,
)
from health_advisor.services.observation import InvalidBristolTypeError

logger = logging.getLogger(__name__)

app = FastAPI(title="Health Advisor AI", version=settings.api_version)

AVAILABLE_ENDPOINTS = [
    "GET /",
    "POST /api/health-advice",
    "POST /api/quick-advice",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception handlers
# =============================================================================


@app.exception_handler(InvalidBristolTypeError)
async def invalid_bristol_type_handler(request: Request, exc: InvalidBristolTypeError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(exc), "success": False},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing JSON bodies."""
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid JSON request body", "success": False},
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc), "success": False},
    )


@app.exception_handler(RateLimitExceededError)
async def rate_limit_handler(request: Request, exc: RateLimitExceededError):
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": str(exc),
            "success": False,
            "retryAfter": exc.retry_after,
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    JSON bodies for routing errors.

    Unmatched routes list the endpoints this service offers.
    """
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": "Endpoint not found",
                "availableEndpoints": AVAILABLE_ENDPOINTS,
                "timestamp": utc_timestamp(),
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Server error occurred",
            "message": str(exc),
            "timestamp": utc_timestamp(),
        },
    )


app.include_router(advice.router)
