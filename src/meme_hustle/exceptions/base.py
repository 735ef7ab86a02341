"""Base exceptions and error codes for MemeHustle."""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for different types of errors."""

    # Store Errors (1000-1999)
    STORE_QUERY_ERROR = "MEME-1000"
    STORE_WRITE_ERROR = "MEME-1001"

    # Generator Errors (2000-2999)
    GENERATOR_ERROR = "MEME-2000"
    GENERATOR_EMPTY_RESPONSE = "MEME-2001"

    # Domain Errors (4000-4999)
    MEME_NOT_FOUND = "MEME-4040"
    INVALID_BID = "MEME-4000"
    INVALID_MESSAGE = "MEME-4001"

    # General Errors (9000-9999)
    UNKNOWN_ERROR = "MEME-9000"


class MemeHustleError(Exception):
    """Base exception class for MemeHustle."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        """
        Initialize base exception.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            original_error: Original exception if this is a wrapped exception
        """
        self.message = message
        self.code = code
        self.details = details or {}
        self.original_error = original_error
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary representation.

        Returns:
            Dictionary containing error details
        """
        error_dict = {
            "code": self.code.value,
            "message": self.message,
            "type": self.__class__.__name__,
        }

        if self.details:
            error_dict["details"] = self.details

        if self.original_error:
            error_dict["original_error"] = str(self.original_error)

        return error_dict


class MemeNotFoundError(MemeHustleError):
    """Raised when a referenced meme does not exist."""

    def __init__(self, meme_id: str) -> None:
        super().__init__("Meme not found", ErrorCode.MEME_NOT_FOUND, details={"meme_id": meme_id})
        self.meme_id = meme_id


class InvalidBidError(MemeHustleError):
    """Raised when a bid does not exceed the current highest bid."""

    def __init__(self, meme_id: str, credits: int, highest_bid: int) -> None:
        super().__init__(
            "Bid must be higher than the current highest bid.",
            ErrorCode.INVALID_BID,
            details={"meme_id": meme_id, "credits": credits, "highest_bid": highest_bid},
        )
        self.highest_bid = highest_bid


class InvalidMessageError(MemeHustleError):
    """Raised when a realtime channel frame cannot be understood."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, ErrorCode.INVALID_MESSAGE, **kwargs)


class UpstreamError(MemeHustleError):
    """Base class for failures of the store or the content generator."""


class StoreError(UpstreamError):
    """Raised when a store read or write fails."""

    def __init__(
        self, message: str, code: ErrorCode = ErrorCode.STORE_QUERY_ERROR, **kwargs: Any
    ) -> None:
        """Initialize store error."""
        super().__init__(message, code, **kwargs)


class GeneratorError(UpstreamError):
    """Raised when the content generator fails or returns nothing usable."""

    def __init__(
        self, message: str, code: ErrorCode = ErrorCode.GENERATOR_ERROR, **kwargs: Any
    ) -> None:
        """Initialize generator error."""
        super().__init__(message, code, **kwargs)
