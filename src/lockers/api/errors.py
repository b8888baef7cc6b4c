"""HTTP error mapping for the Lockers API.

Every domain rejection becomes ``{"error": ..., "code": ...}`` with a status
the caller can branch on. Register after Protean's own handlers so these
take precedence for the types they cover.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from lockers.errors import InvalidState, InvalidToken, NoMatchingPendingShipment

logger = structlog.get_logger(__name__)

# (status, code) per exception type; subclasses come first
_ERROR_MAP = [
    (InvalidToken, 403, "invalid_token"),
    (NoMatchingPendingShipment, 409, "no_matching_pending_shipment"),
    (InvalidState, 409, "invalid_state"),
    (ObjectNotFoundError, 404, "not_found"),
    (ValidationError, 400, "validation_error"),
]


def _messages(exc: Exception):
    return getattr(exc, "messages", None) or str(exc)


def _handler(status_code: int, code: str):
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        logger.info(
            "request_rejected",
            path=request.url.path,
            status_code=status_code,
            code=code,
        )
        return JSONResponse(status_code=status_code, content={"error": _messages(exc), "code": code})

    return handle


def register_locker_exception_handlers(app: FastAPI) -> None:
    for exc_class, status_code, code in _ERROR_MAP:
        app.add_exception_handler(exc_class, _handler(status_code, code))
