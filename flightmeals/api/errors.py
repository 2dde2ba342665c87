"""Error responses in the service envelope shape."""
import logging
from typing import Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from flightmeals.core.errors import ErrorKind, FlightMealsError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SERVER_ERROR: 502,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.NETWORK_ERROR: 503,
    ErrorKind.UNKNOWN: 502,
    ErrorKind.REJECTED: 400,
    ErrorKind.EMPTY_CART: 400,
    ErrorKind.NO_SLOT_SELECTED: 400,
    ErrorKind.SLOT_UNAVAILABLE: 409,
    ErrorKind.INVALID_QUANTITY: 422,
    ErrorKind.ITEM_UNAVAILABLE: 409,
    ErrorKind.STALE_RESPONSE: 409,
}


def error_response(status_code: int, message: str, kind: Optional[ErrorKind] = None) -> JSONResponse:
    """Build a ``{success: false, error}`` response."""
    content = {"success": False, "error": message}
    if kind is not None:
        content["kind"] = str(kind)
    return JSONResponse(status_code=status_code, content=content)


async def flightmeals_error_handler(request: Request, exc: FlightMealsError) -> JSONResponse:
    """Convert engine errors into envelope responses."""
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    logger.warning(
        f"[API] {request.method} {request.url.path} failed - kind: {exc.kind}, "
        f"status: {status_code}, details: {exc.details}"
    )
    return error_response(status_code, exc.message, exc.kind)
