"""Exception handlers that render failures as error envelopes."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.exceptions import BodyTooLargeError, JSONBodyError, PayloadEncodingError
from src.shared.json_helper import get_json_helper

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI app."""

    @app.exception_handler(JSONBodyError)
    async def _json_body_error_handler(request: Request, exc: JSONBodyError):
        logger.warning(
            f"Rejected request body: {exc.detail}",
            extra={
                "path": request.url.path,
                "status_code": exc.status_code,
                "error_code": type(exc).__name__,
            },
        )
        headers = None
        if isinstance(exc, BodyTooLargeError):
            # the rest of the body is never read, so the connection can't be reused
            headers = {"Connection": "close"}
        return get_json_helper().error_json(exc, exc.status_code, headers)

    @app.exception_handler(PayloadEncodingError)
    async def _payload_encoding_error_handler(request: Request, exc: PayloadEncodingError):
        logger.error(
            f"Failed to encode response: {exc}",
            extra={"path": request.url.path, "error_code": type(exc).__name__},
        )
        return get_json_helper().error_json("internal server error", exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
        return get_json_helper().error_json(exc.detail, exc.status_code, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path},
        )
        return get_json_helper().error_json(
            "invalid request data", status.HTTP_422_UNPROCESSABLE_ENTITY
        )
