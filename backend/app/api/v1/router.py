"""BizDesk - API v1 router aggregation."""
from fastapi import APIRouter, Depends

from app.api.deps import require_auth
from app.api.v1.endpoints import auth, documents, menu
from app.api.v1.registrar import register_resource_routes
from app.config import get_settings
from app.resources.registry import ResourceRegistry

settings = get_settings()


def build_api_router(registry: ResourceRegistry) -> APIRouter:
    api_router = APIRouter()

    api_router.include_router(auth.router, prefix=f"{settings.api_root}/auth", tags=["auth"])
    api_router.include_router(menu.router, prefix=settings.api_root, tags=["menu"])
    api_router.include_router(
        documents.router,
        prefix=f"{settings.api_root}/documents",
        tags=["documents"],
        dependencies=[Depends(require_auth)],
    )
    register_resource_routes(api_router, registry)
    return api_router
