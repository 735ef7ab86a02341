"""Error handlers translating service exceptions into API responses."""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ...exceptions.base import (
    InvalidBidError,
    InvalidMessageError,
    MemeHustleError,
    MemeNotFoundError,
    UpstreamError,
)
from ...utils.logging import get_logger

logger = get_logger(__name__)

# Realtime replies for store failures, keyed by inbound event
CHANNEL_FAILURE_MESSAGES = {
    "place_bid": "Failed to place bid",
    "vote": "Failed to register vote",
}


def status_for(exc: MemeHustleError) -> int:
    if isinstance(exc, MemeNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (InvalidBidError, InvalidMessageError)):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_to_dict(exc: MemeHustleError) -> Dict[str, Any]:
    """
    Convert an exception to a dictionary for the API response.

    Args:
        exc: The exception that occurred

    Returns:
        Dictionary with error details
    """
    return {"error": exc.message, "code": exc.code.value}


def channel_error_message(exc: MemeHustleError, event: Optional[str]) -> str:
    """Message sent to a realtime client whose request failed."""
    if isinstance(exc, UpstreamError):
        return CHANNEL_FAILURE_MESSAGES.get(event or "", "Request failed")
    return exc.message


async def meme_hustle_error_handler(request: Request, exc: MemeHustleError) -> JSONResponse:
    status_code = status_for(exc)
    if isinstance(exc, UpstreamError):
        logger.error("request_failed", path=request.url.path, **exc.to_dict())
    else:
        logger.info("request_rejected", path=request.url.path, code=exc.code.value)
    return JSONResponse(status_code=status_code, content=error_to_dict(exc))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MemeHustleError, meme_hustle_error_handler)
