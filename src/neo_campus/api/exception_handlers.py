"""
Exception handlers for FastAPI applications using neo-campus.

CampusError subclasses are rendered with their mapped status code. Storage
and unexpected failures are logged with detail and rendered generically.
"""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import logging

from ..core.exceptions import CampusError, StorageError, get_http_status_code

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


def _error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
    }


def register_exception_handlers(app: FastAPI, is_production: bool = True) -> None:
    """Register neo-campus exception handlers on an application.

    Args:
        app: FastAPI application instance
        is_production: Hide unexpected exception text when True
    """

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage failure on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(exc.error_code, GENERIC_ERROR_MESSAGE),
        )

    @app.exception_handler(CampusError)
    async def campus_error_handler(request: Request, exc: CampusError):
        return JSONResponse(
            status_code=get_http_status_code(exc),
            content=_error_body(exc.error_code, exc.message, exc.details),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        message = GENERIC_ERROR_MESSAGE if is_production else str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("InternalError", message),
        )
