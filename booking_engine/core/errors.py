"""
Domain errors raised by the booking services.

Services raise these; the HTTP layer converts them with ``to_http_exception``
or through the handler registered in ``main.py``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class BookingEngineError(Exception):
    """Base class for all booking engine errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message)

    def to_response(self) -> JSONResponse:
        body: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return JSONResponse(status_code=self.status_code, content=body)


class ValidationError(BookingEngineError):
    """Malformed input or a scheduling rule violation the caller can fix."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class ForbiddenError(BookingEngineError):
    """Requester is authenticated but does not own the target."""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


class NotFoundError(BookingEngineError):
    """Unknown or inactive resource, unknown or foreign hold/booking."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class ConflictError(BookingEngineError):
    """The requested interval overlaps an occupied interval."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "SLOT_CONFLICT"


class ExpiredError(BookingEngineError):
    """The hold TTL elapsed before confirmation."""

    status_code = status.HTTP_410_GONE
    default_code = "HOLD_EXPIRED"


async def booking_engine_error_handler(request, exc: BookingEngineError) -> JSONResponse:
    return exc.to_response()


async def request_validation_error_handler(request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed or missing request fields like any other ValidationError."""
    fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
    return ValidationError("Invalid request", details={"fields": fields}).to_response()
