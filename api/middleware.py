"""
Consolidated middleware for the Protein Tracker API
"""

import time
import logging
from uuid import uuid4
from decimal import Decimal
from typing import Any, Optional

import jwt
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.exceptions import AppError
from core.utils.helpers import utcnow

logger = logging.getLogger("protein_tracker.middleware")


# ============================================================================
# Helper Functions
# ============================================================================


def make_serializable(obj):
    """Convert objects to JSON-serializable format"""
    if isinstance(obj, Decimal):
        return float(obj)
    elif isinstance(obj, dict):
        return {k: make_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [make_serializable(item) for item in obj]
    elif isinstance(obj, BaseException):
        return str(obj)
    return obj


def error_payload(code: str, message: str, details: Optional[Any] = None) -> dict:
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {
        "success": False,
        "error": error,
        "timestamp": utcnow().isoformat(),
    }


# ============================================================================
# Request Logging Middleware
# ============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all HTTP requests and responses"""

    async def dispatch(self, request: Request, call_next):
        # Generate unique request ID
        request_id = str(uuid4())
        request.state.request_id = request_id

        logger.info(
            f"request_started request_id={request_id} method={request.method} "
            f"path={request.url.path} "
            f"client={request.client.host if request.client else None}"
        )

        start_time = time.time()

        try:
            response: Response = await call_next(request)
            process_time = time.time() - start_time

            logger.info(
                f"request_completed request_id={request_id} method={request.method} "
                f"path={request.url.path} status={response.status_code} "
                f"duration={process_time:.4f}s"
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.4f}"

            return response

        except Exception as exc:
            process_time = time.time() - start_time
            logger.error(
                f"request_failed request_id={request_id} method={request.method} "
                f"path={request.url.path} error={exc} duration={process_time:.4f}s",
                exc_info=True,
            )
            raise


# ============================================================================
# Error Handlers
# ============================================================================


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    # Convert errors to JSON-serializable format (handles Decimal, etc.)
    serializable_errors = make_serializable(exc.errors())

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_payload(
            "VALIDATION_ERROR", "Request validation failed", serializable_errors
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions"""
    logger.warning(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(f"HTTP_{exc.status_code}", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def app_exception_handler(request: Request, exc: AppError):
    """Handle service errors using the status carried by the exception"""
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(f"{type(exc).__name__} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.http_status,
        content=error_payload(exc.code, exc.message, make_serializable(exc.details)),
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError):
    """Unique / foreign key violations"""
    logger.warning(f"Integrity error on {request.url.path}: {exc.orig}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_payload("DUPLICATE_VALUE", "Duplicate field value entered"),
    )


async def no_result_exception_handler(request: Request, exc: NoResultFound):
    logger.warning(f"No result on {request.url.path}: {exc}")

    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_payload("NOT_FOUND", "Record not found"),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.url.path}: {exc}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_payload("DATABASE_ERROR", "Database error"),
    )


async def expired_token_exception_handler(
    request: Request, exc: jwt.ExpiredSignatureError
):
    logger.info(f"Expired token on {request.url.path}")

    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=error_payload("TOKEN_EXPIRED", "Token expired"),
    )


async def invalid_token_exception_handler(request: Request, exc: jwt.InvalidTokenError):
    logger.info(f"Invalid token on {request.url.path}: {exc}")

    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=error_payload("INVALID_TOKEN", "Invalid token"),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.exception(f"Unexpected error on {request.url.path}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
    )


EXCEPTION_HANDLERS = (
    (RequestValidationError, validation_exception_handler),
    (StarletteHTTPException, http_exception_handler),
    (AppError, app_exception_handler),
    (IntegrityError, integrity_exception_handler),
    (NoResultFound, no_result_exception_handler),
    (SQLAlchemyError, database_exception_handler),
    (jwt.ExpiredSignatureError, expired_token_exception_handler),
    (jwt.InvalidTokenError, invalid_token_exception_handler),
    (Exception, general_exception_handler),
)
