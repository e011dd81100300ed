"""Helpers for reading JSON request bodies and writing JSON responses."""

import json
import re
from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from pydantic import TypeAdapter, ValidationError
from starlette.datastructures import Headers, MutableHeaders
from starlette.requests import Request
from starlette.responses import Response

from src.core.config import DEFAULT_MAX_BODY_BYTES, get_settings
from src.core.exceptions import (
    BodyTooLargeError,
    EmptyBodyError,
    JSONTypeError,
    MalformedJSONError,
    MultipleJSONValuesError,
    PayloadEncodingError,
)
from src.shared.schemas import ResponseEnvelope

DEFAULT_ERROR_STATUS = status.HTTP_400_BAD_REQUEST

HeaderSet = Mapping[str, str | Sequence[str]] | Headers

_WHITESPACE = re.compile(r"[ \t\n\r]*")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid literal {name!r}")


_decoder = json.JSONDecoder(parse_constant=_reject_constant)


@lru_cache(maxsize=256)
def _adapter_for(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def decode_single_value(raw: bytes) -> Any:
    """Decode exactly one JSON value, rejecting anything but whitespace after it."""
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedJSONError("body contains invalid UTF-8") from exc

    start = _WHITESPACE.match(text).end()
    if start == len(text):
        raise EmptyBodyError()

    try:
        value, end = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        raise MalformedJSONError(
            f"body contains badly-formed JSON (at character {exc.pos}): {exc.msg}"
        ) from exc
    except ValueError as exc:
        raise MalformedJSONError(f"body contains badly-formed JSON: {exc}") from exc
    except RecursionError as exc:
        raise MalformedJSONError("body exceeds the maximum nesting depth") from exc

    if _WHITESPACE.match(text, end).end() != len(text):
        raise MultipleJSONValuesError()
    return value


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors(include_url=False)[0]
    location = ".".join(str(part) for part in first["loc"])
    if location:
        return f"body has an invalid value for {location!r}: {first['msg']}"
    return f"body has an invalid value: {first['msg']}"


def _merge_headers(target: MutableHeaders, extra: HeaderSet) -> None:
    for key in dict.fromkeys(extra.keys()):
        values = extra.getlist(key) if isinstance(extra, Headers) else extra[key]
        if isinstance(values, str):
            values = [values]
        del target[key]
        for value in values:
            target.append(key, value)


class JsonHelper:
    """Reads and writes JSON bodies for route handlers.

    Instances hold only read-only configuration and are safe to share across
    concurrent requests.
    """

    def __init__(
        self,
        max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
        content_type: str = "application/json",
    ):
        if max_body_bytes <= 0:
            raise ValueError("max_body_bytes must be positive")
        self.max_body_bytes = max_body_bytes
        self.content_type = content_type

    async def read_json(self, request: Request, target: Any = Any) -> Any:
        """Read the request body and return its single JSON value as ``target``.

        The body stream is consumed; it cannot be read again afterwards.
        """
        raw = await self._read_body(request)
        value = decode_single_value(raw)
        if target is Any:
            return value
        # strict JSON-mode validation: a JSON string never fills a number or bool field
        try:
            return _adapter_for(target).validate_json(raw, strict=True)
        except ValidationError as exc:
            raise JSONTypeError(
                _describe_validation_error(exc),
                exc.errors(include_url=False, include_context=False),
            ) from exc
        except RecursionError as exc:
            raise MalformedJSONError("body exceeds the maximum nesting depth") from exc

    async def _read_body(self, request: Request) -> bytes:
        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_body_bytes:
            raise BodyTooLargeError(self.max_body_bytes)

        body = bytearray()
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > self.max_body_bytes:
                raise BodyTooLargeError(self.max_body_bytes)
        return bytes(body)

    def encode(self, payload: Any) -> bytes:
        """Serialize ``payload`` the way ``JSONResponse`` renders content."""
        try:
            content = jsonable_encoder(payload)
            return json.dumps(
                content,
                ensure_ascii=False,
                allow_nan=False,
                indent=None,
                separators=(",", ":"),
            ).encode("utf-8")
        except (TypeError, ValueError, RecursionError) as exc:
            raise PayloadEncodingError(f"payload is not JSON serializable: {exc}") from exc

    def write_json(
        self,
        status_code: int,
        payload: Any,
        headers: HeaderSet | None = None,
    ) -> Response:
        """Build the JSON response for ``payload``.

        Caller headers replace same-named headers first; ``Content-Type`` is
        set afterwards, so the configured media type always wins.
        """
        if not 100 <= status_code <= 999:
            raise ValueError(f"invalid status code {status_code}")

        body = self.encode(payload)
        response = Response(content=body, status_code=status_code)
        if headers:
            _merge_headers(response.headers, headers)
        response.headers["content-type"] = self.content_type
        return response

    def error_json(
        self,
        error: BaseException | str,
        status_code: int | None = None,
        headers: HeaderSet | None = None,
    ) -> Response:
        """Write the error envelope for ``error`` (400 unless told otherwise)."""
        if status_code is None:
            status_code = DEFAULT_ERROR_STATUS
        envelope = ResponseEnvelope(error=True, message=str(error))
        return self.write_json(status_code, envelope, headers)


@lru_cache(1)
def get_json_helper() -> JsonHelper:
    """FastAPI dependency returning the helper configured from settings."""
    settings = get_settings()
    return JsonHelper(
        max_body_bytes=settings.max_body_bytes,
        content_type=settings.json_content_type,
    )
