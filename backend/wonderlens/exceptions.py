from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Optional
import traceback
from .logger import logger


class WonderLensBaseException(Exception):
    """Base exception for the WonderLens backend"""
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class MissingImageError(WonderLensBaseException):
    """Raised when an analysis request carries no image"""
    def __init__(self):
        super().__init__("No image provided", "MISSING_IMAGE", 400)


class InvalidParameterError(WonderLensBaseException):
    """Raised when a required parameter is missing or out of range"""
    def __init__(self, message: str):
        super().__init__(message, "INVALID_PARAMETER", 400)


class DeviceNotFoundError(WonderLensBaseException):
    def __init__(self, device_id: str):
        super().__init__("Device not found", "DEVICE_NOT_FOUND", 404, details={"device_id": device_id})


class ScanNotFoundError(WonderLensBaseException):
    def __init__(self, scan_id: str):
        super().__init__("Scan not found", "SCAN_NOT_FOUND", 404, details={"scan_id": scan_id})


class ContentNotFoundError(WonderLensBaseException):
    """Raised when no pre-generated news or quiz pack matches the filters"""
    def __init__(self, message: str):
        super().__init__(message, "CONTENT_NOT_FOUND", 404)


class StorageError(WonderLensBaseException):
    """Raised when object storage operations fail"""
    def __init__(self, message: str = "Failed to upload image", details: Optional[Any] = None):
        super().__init__(message, "STORAGE_ERROR", 500, details=details)


class DataStoreError(WonderLensBaseException):
    """Raised when a database statement fails"""
    def __init__(self, message: str = "Database error", details: Optional[Any] = None):
        super().__init__(message, "DATABASE_ERROR", 500, details=details)


class LLMServiceError(WonderLensBaseException):
    """Raised when the LLM API call fails"""
    def __init__(self, details: Optional[Any] = None):
        super().__init__("OpenAI API error", "LLM_ERROR", 500, details=details)


class ModelOutputParseError(ValueError):
    """Model text could not be recovered as a JSON object"""


def _error_body(message: Any, code: str, details: Optional[Any] = None) -> dict:
    body = {"error": message, "code": code}
    if details is not None:
        body["details"] = details
    return body


async def wonderlens_exception_handler(request: Request, exc: WonderLensBaseException):
    """Handle custom application exceptions"""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"Application exception: {exc.code} - {exc.message}",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "request_path": request.url.path,
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.code, exc.details),
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions"""
    logger.warning(
        f"HTTP {exc.status_code}: {exc.detail}",
        extra={
            "http_status_code": exc.status_code,
            "http_detail": exc.detail,
            "request_path": request.url.path,
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, "HTTP_ERROR"),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a client error, never a 422"""
    errors = exc.errors()
    logger.warning(
        "Request validation failed",
        extra={
            "request_path": request.url.path,
            "validation_errors": [str(e.get("msg")) for e in errors],
        }
    )
    fields = [".".join(str(p) for p in e.get("loc", ()) if p not in ("body", "query")) for e in errors]
    return JSONResponse(
        status_code=400,
        content=_error_body("Invalid request parameters", "INVALID_PARAMETER", {"fields": fields}),
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions"""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
            "request_path": request.url.path,
            "exc_traceback": traceback.format_exc(),
        }
    )
    return JSONResponse(
        status_code=500,
        content=_error_body("An internal error occurred. Please try again later.", "INTERNAL_SERVER_ERROR"),
    )
