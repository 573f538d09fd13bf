"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Dict

logger = logging.getLogger("dispatch.http")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None, error_code: str = "ERR_NOT_FOUND_001"):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class OrderNotFoundError(ResourceNotFoundError):
    """Raised when the target order does not exist."""

    def __init__(self, order_id: int):
        super().__init__("Order", order_id, error_code="ERR_ORDER_NOT_FOUND")


class MasterNotFoundError(ResourceNotFoundError):
    """Raised when a referenced master does not exist."""

    def __init__(self, master_id: int):
        super().__init__("Master", master_id, error_code="ERR_MASTER_NOT_FOUND")


class LedgerEntryNotFoundError(ResourceNotFoundError):
    """Raised when a ledger entry does not exist."""

    def __init__(self, entry_id: int):
        super().__init__("Ledger entry", entry_id, error_code="ERR_LEDGER_NOT_FOUND")


class OrderValidationError(AppException):
    """Raised for malformed or missing input on order mutations."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details
        )


class TerminalOrderImmutableError(AppException):
    """Raised when an edit is attempted on a closed order."""

    def __init__(self, order_id: int, order_status: str):
        super().__init__(
            message=f"Order {order_id} is closed ({order_status}) and can no longer be changed",
            error_code="ERR_ORDER_CLOSED",
            status_code=status.HTTP_409_CONFLICT,
            details={"order_id": order_id, "status": order_status}
        )


class InvalidTransitionError(AppException):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            message=f"Status change {from_status} -> {to_status} is not allowed",
            error_code="ERR_INVALID_TRANSITION",
            status_code=status.HTTP_409_CONFLICT,
            details={"from": from_status, "to": to_status}
        )


class ConcurrentOrderUpdateError(AppException):
    """Raised when the order changed between read and write."""

    def __init__(self, order_id: int, expected_version: int):
        super().__init__(
            message=f"Order {order_id} was modified by another request, reload and retry",
            error_code="ERR_ORDER_CONFLICT",
            status_code=status.HTTP_409_CONFLICT,
            details={"order_id": order_id, "expected_version": expected_version}
        )


class CityAccessDeniedError(AppException):
    """Raised when a principal acts outside its city scope."""

    def __init__(self, city: str):
        super().__init__(
            message=f"Access denied for city {city}",
            error_code="ERR_PERM_CITY",
            status_code=status.HTTP_403_FORBIDDEN,
            details={"city": city}
        )


class StoreUnavailableError(AppException):
    """Raised when the entity store fails. Never carries storage details."""

    def __init__(self):
        super().__init__(
            message="An internal server error occurred",
            error_code="ERR_STORE_UNAVAILABLE",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
                    for err in exc.errors()
                ]
            }
        }
    )


async def store_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handler for storage failures. Details stay in the log."""
    logger.error(
        "Store failure on %s %s: %s", request.method, request.url.path, type(exc).__name__,
        exc_info=exc
    )
    return await app_exception_handler(request, StoreUnavailableError())


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.error(
        "Unhandled exception: %s: %s", type(exc).__name__, str(exc),
        exc_info=exc
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
