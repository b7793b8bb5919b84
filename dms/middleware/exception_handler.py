"""Exception handler producing the structured error body."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import DmsException

logger = logging.getLogger(__name__)


async def dms_exception_handler(request: Request, exc: DmsException) -> JSONResponse:
    """Render a DmsException as ``{"error", "message", "details"}``.

    Server-side failures (5xx) are logged as errors; client errors as
    warnings, since they are expected traffic (bad input, missing grants).
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"{exc.error_code.value}: {exc.message}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )
