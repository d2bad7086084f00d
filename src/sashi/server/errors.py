"""Error responses for the HTTP surface: always ``{"error": str, "details"?: ...}``."""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised by routes and dependencies to return a non-200 response."""

    def __init__(self, status_code: int, error: str, details: Optional[Any] = None):
        self.status_code = status_code
        self.error = error
        self.details = details
        super().__init__(error)


def _error_body(error: str, details: Optional[Any]) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    return body


async def _handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.error, exc.details))


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]
    logger.debug("Malformed request body", extra={"route": request.url.path})
    return JSONResponse(status_code=400, content=_error_body("Malformed request", details))


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _handle_api_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
