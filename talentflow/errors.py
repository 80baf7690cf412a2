"""Structured error helpers for API responses."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from talentflow.services.exceptions import (
    EmptyExportError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ServiceError,
    ValidationError,
)


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = build_error_payload(code, message, details)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


def to_app_error(exc: ServiceError) -> AppError:
    """Map a service-layer exception onto the HTTP error contract."""
    if isinstance(exc, ValidationError):
        return AppError(422, "VALIDATION_ERROR", str(exc), exc.details)
    if isinstance(exc, NotFoundError):
        return AppError(404, f"{exc.entity.upper()}_NOT_FOUND", str(exc), exc.details)
    if isinstance(exc, EmptyExportError):
        return AppError(404, "NOTHING_TO_EXPORT", str(exc), exc.details)
    if isinstance(exc, PermissionDeniedError):
        return AppError(403, "NOT_JOB_OWNER", str(exc), exc.details)
    if isinstance(exc, PersistenceError):
        return AppError(500, "PERSISTENCE_ERROR", str(exc), exc.details)
    return AppError(500, "INTERNAL_ERROR", str(exc), exc.details)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return await app_error_handler(request, to_app_error(exc))


def raise_app_error(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Raise an AppError with a standardized error shape."""
    raise AppError(status_code, code, message, details)
