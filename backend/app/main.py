"""
BizDesk - FastAPI ASGI Entry Point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import build_api_router
from app.config import get_settings
from app.core.auth_middleware import JWTAuthMiddleware
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.core.rate_limit import RateLimitMiddleware
from app.core.redis import close_redis
from app.db.session import engine
from app.resources import discover_resources

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: release DB and Redis connections on shutdown."""
    logger.info("%s started with %d resources", settings.PROJECT_NAME, len(app.state.resources))
    yield
    await close_redis()
    await engine.dispose()


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    registry = discover_resources(
        default_prefix=settings.API_PREFIX, default_version=settings.API_VERSION
    )

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Business management API: generic CRUD over registered resources",
        version="0.1.0",
        docs_url=f"{settings.api_root}/docs",
        redoc_url=f"{settings.api_root}/redoc",
        openapi_url=f"{settings.api_root}/openapi.json",
        lifespan=lifespan,
    )
    app.state.resources = registry

    if settings.RATE_LIMIT_ENABLED:
        app.add_middleware(RateLimitMiddleware)
    app.add_middleware(JWTAuthMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(build_api_router(registry))

    @app.get("/health")
    async def health():
        """Health check for load balancers and Docker."""
        return {"status": "ok", "service": "bizdesk"}

    return app


app = create_app()
