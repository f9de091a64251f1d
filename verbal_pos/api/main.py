"""HTTP API process entrypoint (FastAPI + uvicorn)."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from verbal_pos.api import commands, products, sales
from verbal_pos.app import App, create_app
from verbal_pos.config.logging import configure_logging
from verbal_pos.config.settings import load_settings

logger = logging.getLogger(__name__)


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    return f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "")


def create_api(container: App) -> FastAPI:
    """Build the FastAPI application around an application container.

    The container's DB pool (if any) is opened on startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(_api: FastAPI) -> AsyncIterator[None]:
        await container.open()
        try:
            yield
        finally:
            logger.info("shutting down")
            await container.close()

    api = FastAPI(
        title="Verbal POS API",
        description="Inventory and point-of-sale backend with text commands",
        version="0.1.0",
        lifespan=lifespan,
    )
    api.state.container = container

    api.add_middleware(
        CORSMiddleware,
        allow_origins=container.settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @api.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"message": exc.detail}, status_code=exc.status_code)

    @api.exception_handler(RequestValidationError)
    async def validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {"message": _first_error_message(exc)},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    @api.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "message": "Verbal POS backend is running."}

    api.include_router(products.router, prefix="/api")
    api.include_router(sales.router, prefix="/api")
    api.include_router(commands.router, prefix="/api")
    return api


def main() -> None:
    """Run the HTTP API with uvicorn."""

    settings = load_settings()
    configure_logging()

    api = create_api(create_app(settings))
    uvicorn.run(api, host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    main()
