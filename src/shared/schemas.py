"""Common Pydantic schemas."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, SerializerFunctionWrapHandler, model_serializer

T = TypeVar("T")


class ResponseEnvelope(BaseModel, Generic[T]):
    """Standard API envelope.

    ``data`` is left out of the serialized form when it is ``None``, so an
    error envelope renders as ``{"error": true, "message": "..."}``.
    """

    error: bool = False
    message: str = ""
    data: T | None = None

    @model_serializer(mode="wrap")
    def omit_missing_data(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        dumped = handler(self)
        if dumped.get("data") is None:
            dumped.pop("data", None)
        return dumped
