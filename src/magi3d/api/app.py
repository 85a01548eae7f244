"""FastAPI application factory exposing the task endpoints."""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from ..client import TaskClient
from ..exceptions import Magi3DError
from ..logging import configure_logging
from ..providers.providers_factory import create_provider
from .errors import magi3d_error_handler, request_validation_error_handler
from .routes import router


def create_app(client: TaskClient | None = None, *, provider: str = "tripo") -> FastAPI:
    """Build the FastAPI instance; without ``client`` one is built from settings."""
    configure_logging()
    task_client = client or TaskClient(create_provider(provider))

    @contextlib.asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await task_client.aclose()

    app = FastAPI(title="magi3d", lifespan=lifespan)
    app.state.task_client = task_client
    app.add_exception_handler(Magi3DError, magi3d_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.include_router(router)
    return app


__all__ = ["create_app"]
