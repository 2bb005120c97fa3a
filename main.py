import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from shortlink_app.config import Settings, settings as default_settings
from shortlink_app.cache.factory import CacheFactory, CacheBackend
from shortlink_app.database.connection import create_engine, create_session_factory, init_db
from shortlink_app.exceptions import InvalidURLError
from shortlink_app.logging_config import setup_logging
from shortlink_app.services.code_generator import CodeGenerator
from shortlink_app.services.link_cache import LinkCache
from shortlink_app.api.v1 import links, shortener

logger = logging.getLogger("shortlink_app.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build every long-lived collaborator once and keep it on app.state."""
    settings: Settings = app.state.settings

    # Startup: database and schema (create-if-absent)
    engine = create_engine(settings.database_url, echo=settings.debug)
    await init_db(engine)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Startup: cache (falls back to NullCache if unreachable)
    cache = await CacheFactory.create(CacheBackend(settings.cache_backend), settings)
    app.state.cache = cache
    app.state.link_cache = LinkCache(cache, ttl=settings.cache_ttl)

    app.state.code_generator = CodeGenerator(
        length=settings.code_length,
        alphabet=settings.code_alphabet,
        max_attempts=settings.code_max_attempts,
        reserved_codes=reserved_path_segments(app),
    )
    logger.info(
        "%s started (cache=%s, code length=%d)",
        settings.app_name, type(cache).__name__, settings.code_length,
    )

    try:
        yield
    finally:
        # Shutdown: release cache connection and dispose of the engine
        await cache.close()
        await engine.dispose()


def reserved_path_segments(app: FastAPI) -> set:
    """Single path segments owned by fixed routes ('health', 'docs', ...)."""
    segments = set()
    for route in app.routes:
        first = route.path.strip("/").split("/")[0]
        if first and not first.startswith("{"):
            segments.add(first)
    return segments


async def invalid_url_handler(request: Request, exc: InvalidURLError):
    return PlainTextResponse(exc.message, status_code=status.HTTP_400_BAD_REQUEST)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # The only request body is {"url": ...}; a missing or non-string url is an invalid URL
    return PlainTextResponse(InvalidURLError.message, status_code=status.HTTP_400_BAD_REQUEST)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Composition root: wire settings, routes and handlers into a FastAPI app."""
    settings = settings or default_settings
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="A URL shortener service built with FastAPI",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(InvalidURLError, invalid_url_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.get("/")
    def read_root():
        """Root endpoint with API information"""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs",
            "redoc": "/redoc"
        }

    @app.get("/health")
    def health_check(request: Request):
        """Health check endpoint"""
        return {
            "status": "healthy",
            "environment": settings.environment,
            "cache": type(request.app.state.cache).__name__,
        }

    ######## Include routers
    # Fixed paths first: the catch-all /{code} route is registered last
    app.include_router(links.router, prefix="/api/v1")
    app.include_router(shortener.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=default_settings.host, port=default_settings.port)
