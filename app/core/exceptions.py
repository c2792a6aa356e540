"""
Domain exceptions for bulk catalog operations and the plain-text error handler.
"""
import logging

from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class BulkOperationError(Exception):
    """Base error raised while dispatching a bulk operation."""


class TabularParseError(BulkOperationError):
    """The uploaded file could not be parsed as CSV."""


class UnsupportedOperationError(BulkOperationError):
    """Unknown operation kind, export kind or export format."""


class ProgressStoreUnavailable(BulkOperationError):
    """The progress store could not be reached for a read."""


async def http_exception_handler(request: Request, exc: HTTPException) -> PlainTextResponse:
    """Render HTTP errors as plain text bodies."""
    logger.warning(f"HTTP error {exc.status_code} on {request.url.path}: {exc.detail}")
    return PlainTextResponse(
        str(exc.detail),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )
