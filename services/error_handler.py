"""Exception handlers registered on the FastAPI app.

Domain errors become stable {"detail", "error"} payloads. Anything unexpected is
logged with its traceback and returned as a generic 500 so storage errors never
leak to clients.
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from services.errors import MarketplaceError

logger = logging.getLogger(__name__)


async def handle_marketplace_error(request: Request, exc: MarketplaceError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


async def handle_exception(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error": "internal"},
    )
