"""Exception handlers that shape error responses."""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.schemas.auth import ValidationErrorResponse

logger = logging.getLogger(__name__)

_VALUE_ERROR_PREFIX = "Value error, "


def field_errors(exc: RequestValidationError) -> dict[str, str]:
    """Flatten pydantic errors to {field: message}; the first error per field wins."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        # Integer parts are list indices or, for malformed JSON, a byte offset.
        loc = [part for part in err.get("loc", ()) if isinstance(part, str) and part != "body"]
        field = ".".join(loc) or "body"
        msg = str(err.get("msg", "invalid value"))
        if msg.startswith(_VALUE_ERROR_PREFIX):
            msg = msg[len(_VALUE_ERROR_PREFIX):]
        errors.setdefault(field, msg)
    return errors


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Return 400 with a field-level message map instead of FastAPI's default 422."""
    errors = field_errors(exc)
    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "fields": sorted(errors)},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationErrorResponse(errors=errors).model_dump(),
    )
