"""HTTP mapping for domain exceptions."""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from calorie_tracker.errors import DomainException, DomainExceptionCode

_logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    DomainExceptionCode.BAD_REQUEST: 400,
    DomainExceptionCode.VALIDATION_ERROR: 400,
    DomainExceptionCode.UNAUTHORIZED: 401,
    DomainExceptionCode.FORBIDDEN: 403,
    DomainExceptionCode.NOT_FOUND: 404,
    DomainExceptionCode.INTERNAL_SERVER_ERROR: 500,
}


def status_code_for(code: DomainExceptionCode) -> int:
    """Return the HTTP status for a domain error code."""
    return _STATUS_BY_CODE.get(code, 500)


def error_body(exc: DomainException, path: str) -> dict[str, object]:
    """Render a domain exception as a JSON response body."""
    return {
        "timestamp": datetime.now(tz=UTC).isoformat(),
        "path": path,
        "message": exc.message,
        "code": int(exc.code),
        "extensions": [
            {"message": extension.message, "key": extension.key}
            for extension in exc.extensions
        ],
    }


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain exception handler on an application."""

    @app.exception_handler(DomainException)
    async def handle_domain_exception(
        request: Request, exc: DomainException
    ) -> JSONResponse:
        status_code = status_code_for(exc.code)
        if status_code >= 500:
            _logger.error("Domain error on %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=status_code, content=error_body(exc, request.url.path)
        )
