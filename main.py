"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from starlette.responses import Response

from src.core.config import get_settings
from src.core.error_handlers import register_exception_handlers
from src.core.observability import setup_logging
from src.shared.json_helper import JsonHelper, get_json_helper
from src.shared.schemas import ResponseEnvelope


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version="0.1.0",
        lifespan=lifespan,
    )
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check(helper: JsonHelper = Depends(get_json_helper)) -> Response:
        return helper.write_json(200, ResponseEnvelope(data={"status": "ok"}))

    return app


app = create_app()
