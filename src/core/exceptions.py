"""Errors raised while moving JSON in and out of HTTP messages."""

from typing import Any

from fastapi import status


class JSONBodyError(Exception):
    """Raised when a request body cannot be read as a single JSON value."""

    def __init__(self, detail: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class EmptyBodyError(JSONBodyError):
    def __init__(self) -> None:
        super().__init__("body must not be empty")


class MalformedJSONError(JSONBodyError):
    """The body is not well-formed JSON."""


class JSONTypeError(JSONBodyError):
    """The decoded value does not match the expected shape."""

    def __init__(self, detail: str, errors: list[dict[str, Any]] | None = None):
        self.errors = errors or []
        super().__init__(detail)


class BodyTooLargeError(JSONBodyError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"body must not be larger than {limit} bytes",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )


class MultipleJSONValuesError(JSONBodyError):
    def __init__(self) -> None:
        super().__init__("body must have only a single JSON value")


class PayloadEncodingError(Exception):
    """Raised when a response payload cannot be serialized to JSON."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
