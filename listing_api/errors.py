"""Visit booking errors and their HTTP mapping."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class VisitError(Exception):
    """Base exception for the visit booking core."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(VisitError):
    """Referenced entity is absent or not visible to the caller."""
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Conflict(VisitError):
    """Uniqueness or slot collision."""
    code = "conflict"


class InvalidTransition(VisitError):
    """Status change not allowed from the current status."""
    code = "invalid_transition"


class InvalidInput(VisitError):
    """Malformed or missing request data."""
    code = "invalid_input"


class Unauthorized(VisitError):
    """Caller lacks the role or ownership for the operation."""
    status_code = status.HTTP_403_FORBIDDEN
    code = "unauthorized"


class Unauthenticated(Unauthorized):
    """No usable caller identity."""
    status_code = status.HTTP_401_UNAUTHORIZED


async def visit_error_handler(request: Request, exc: VisitError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.code},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected request {request.method} {request.url.path}: {len(exc.errors())} validation error(s)")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors()), "error": InvalidInput.code},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(VisitError, visit_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
