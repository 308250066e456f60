"""Exception → HTTP response mapping.

NOT_FOUND maps to 404 with the same body whether the entity is missing
or belongs to another company.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from access import (
    AccessError,
    ForbiddenError,
    NotFoundError,
    OwnershipLookupError,
    UnknownRoleError,
)
from core.observability.logging import get_logger
from qc import DuplicateError, QCValidationError


logger = get_logger(__name__)


def _error(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "code": code}},
    )


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, exc.message, "NOT_FOUND")


async def forbidden_handler(request: Request, exc: ForbiddenError) -> JSONResponse:
    return _error(403, exc.message, "FORBIDDEN")


async def access_error_handler(request: Request, exc: AccessError) -> JSONResponse:
    return _error(403, exc.message, "FORBIDDEN")


async def lookup_error_handler(request: Request, exc: OwnershipLookupError) -> JSONResponse:
    logger.error(f"Ownership store unavailable: {exc}")
    return _error(503, "Ownership lookup failed", "LOOKUP_ERROR")


async def validation_error_handler(request: Request, exc: QCValidationError) -> JSONResponse:
    return _error(422, exc.message, exc.code)


async def duplicate_error_handler(request: Request, exc: DuplicateError) -> JSONResponse:
    return _error(409, exc.message, exc.code)


async def unknown_role_handler(request: Request, exc: UnknownRoleError) -> JSONResponse:
    logger.warning(f"Stored role outside the role set: {exc.role!r}")
    return _error(422, str(exc), "UNKNOWN_ROLE")


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain exception handlers on an app."""
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ForbiddenError, forbidden_handler)
    app.add_exception_handler(AccessError, access_error_handler)
    app.add_exception_handler(OwnershipLookupError, lookup_error_handler)
    app.add_exception_handler(QCValidationError, validation_error_handler)
    app.add_exception_handler(DuplicateError, duplicate_error_handler)
    app.add_exception_handler(UnknownRoleError, unknown_role_handler)
