"""
Translate ledger errors into HTTP responses.

Engines raise typed errors from ``skillverse.core.exceptions``; this module
is the only place that knows about status codes.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .exceptions import LedgerError, InternalError


logger = logging.getLogger(__name__)


def ledger_error_response(exc: LedgerError) -> JSONResponse:
    """Build the JSON body for a ledger error."""
    content = {
        "success": False,
        "error": exc.code,
        "detail": exc.message,
    }
    content.update(exc.extra)
    return JSONResponse(status_code=exc.status_code, content=content)


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")
    return ledger_error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the ledger error handlers to the application."""
    app.add_exception_handler(LedgerError, ledger_error_handler)
