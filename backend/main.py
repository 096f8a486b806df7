"""
Emote On Demand - application entry point

Wires configuration, the 7TV client, the registry and the routers into a
FastAPI app. Run with:

    cd backend
    uvicorn main:create_app --factory --port 3000
"""

import asyncio
import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cache.routes import router as cache_router
from config import Settings, load_settings
from emotes.registry import EmoteRegistry
from emotes.resolver import ImageResolver
from emotes.routes_fastapi import api_router, image_router
from emotes.upstream_client import SevenTVClient

logger = logging.getLogger(__name__)

API_MAX_AGE = 30 * 60               # JSON responses: 30 minutes
IMAGE_MAX_AGE = 60 * 60 * 24 * 7    # Images and pages: 7 days


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def sweep_expired(registry: EmoteRegistry, period: float) -> None:
    """Periodically drop expired entries from the name index."""
    while True:
        await asyncio.sleep(period)
        removed = registry.by_name_cache.cleanup_expired()
        if removed:
            logger.debug(f"[Main] Swept {removed} expired name entries")


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Parsed configuration, loaded from the environment if omitted
        http_client: Optional preconfigured httpx client (tests inject a mock transport)
    """
    configure_logging()
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = SevenTVClient(
            api_base_url=settings.api_base_url,
            cdn_base_url=settings.cdn_base_url,
            timeout=settings.upstream_timeout,
            http_client=http_client,
        )
        registry = EmoteRegistry(settings.emote_set_ids, client, cache_ttl=settings.cache_ttl)
        app.state.registry = registry
        app.state.resolver = ImageResolver(client)

        # A failure here aborts startup
        await registry.load_all()

        sweeper = None
        if settings.cache_check_period > 0 and settings.cache_ttl > 0:
            sweeper = asyncio.create_task(sweep_expired(registry, settings.cache_check_period))

        logger.info(f"[Main] Ready ({len(registry.all_emotes)} emotes, env={settings.environment})")
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                try:
                    await sweeper
                except asyncio.CancelledError:
                    pass
            await client.close()
            logger.info("[Main] SevenTV client closed")

    app = FastAPI(title="Emote On Demand", lifespan=lifespan)
    app.state.settings = settings

    @app.middleware("http")
    async def log_and_cache_headers(request: Request, call_next):
        response = await call_next(request)
        max_age = API_MAX_AGE if request.url.path.startswith("/api") else IMAGE_MAX_AGE
        response.headers["Cache-Control"] = f"max-age={max_age}"
        response.headers["Vary"] = "Accept"
        logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
        return response

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(
                status_code=404,
                content={"detail": f"Route not found: {request.method} {request.url.path}"},
            )
        return await http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"[Main] Unhandled error on {request.url.path}: {exc}")
        content = {"detail": str(exc) or exc.__class__.__name__}
        if not settings.is_production:
            content["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
        return JSONResponse(status_code=500, content=content)

    # Order matters: image_router's /{emote_path} is a catch-all
    app.include_router(cache_router)
    app.include_router(api_router)
    app.include_router(image_router)

    return app


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
