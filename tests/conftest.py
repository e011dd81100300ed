from pathlib import Path
import sys

import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import Response

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from main import create_app  # noqa: E402
from src.shared.json_helper import JsonHelper, get_json_helper  # noqa: E402
from src.shared.schemas import ResponseEnvelope  # noqa: E402


class ItemIn(BaseModel):
    name: str
    quantity: int


@pytest.fixture
def app():
    app = create_app()

    @app.post("/echo")
    async def echo(request: Request, helper: JsonHelper = Depends(get_json_helper)) -> Response:
        payload = await helper.read_json(request)
        return helper.write_json(200, payload)

    @app.post("/items")
    async def create_item(request: Request, helper: JsonHelper = Depends(get_json_helper)) -> Response:
        item = await helper.read_json(request, ItemIn)
        return helper.write_json(201, ResponseEnvelope(data=item), {"Location": f"/items/{item.name}"})

    @app.get("/items/{item_id}")
    async def get_item(item_id: int, helper: JsonHelper = Depends(get_json_helper)) -> Response:
        return helper.write_json(200, ResponseEnvelope(data={"id": item_id}))

    @app.get("/broken")
    async def broken(helper: JsonHelper = Depends(get_json_helper)) -> Response:
        return helper.write_json(200, {"value": float("nan")})

    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def make_request():
    """Build a bare ``Request`` whose body arrives in the given chunks."""

    def factory(*chunks: bytes, headers: dict[str, str] | None = None) -> Request:
        messages = [
            {"type": "http.request", "body": chunk, "more_body": index < len(chunks) - 1}
            for index, chunk in enumerate(chunks)
        ] or [{"type": "http.request", "body": b"", "more_body": False}]

        async def receive():
            return messages.pop(0)

        scope = {
            "type": "http",
            "method": "POST",
            "path": "/",
            "query_string": b"",
            "headers": [
                (key.lower().encode("latin-1"), value.encode("latin-1"))
                for key, value in (headers or {}).items()
            ],
        }
        request = Request(scope, receive)
        request.state.pending = messages
        return request

    return factory
