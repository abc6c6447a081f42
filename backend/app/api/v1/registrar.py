"""BizDesk - Route registration for API resources.

Each resource gets seven authenticated routes under
``/{api_prefix}/{version}/{uri}``. The literal ``/schema`` and ``/columns``
routes are added before ``/{id}`` so the wildcard never captures them.
"""
import logging

from fastapi import APIRouter, Depends

from app.api.deps import require_auth
from app.api.v1.endpoints.resources import ResourceController
from app.resources.registry import ResourceDescriptor, ResourceRegistry

logger = logging.getLogger(__name__)


def build_resource_router(descriptor: ResourceDescriptor) -> APIRouter:
    controller = ResourceController(descriptor)
    name = descriptor.name
    router = APIRouter(
        prefix=f"/{descriptor.api_prefix}/{descriptor.version}/{descriptor.uri}",
        tags=[descriptor.uri],
        dependencies=[Depends(require_auth)],
    )

    router.add_api_route("", controller.index, methods=["GET"], name=f"{name}.index")
    router.add_api_route("", controller.store, methods=["POST"], name=f"{name}.store", status_code=201)
    router.add_api_route("/schema", controller.schema, methods=["GET"], name=f"{name}.schema")
    router.add_api_route("/columns", controller.columns, methods=["GET"], name=f"{name}.columns")
    router.add_api_route("/{id}", controller.show, methods=["GET"], name=f"{name}.show")
    router.add_api_route("/{id}", controller.update, methods=["PUT", "PATCH"], name=f"{name}.update")
    router.add_api_route("/{id}", controller.destroy, methods=["DELETE"], name=f"{name}.destroy")
    return router


def register_resource_routes(router: APIRouter, registry: ResourceRegistry) -> None:
    for descriptor in registry.values():
        router.include_router(build_resource_router(descriptor))
        logger.info("Registered resource routes for %s at %s", descriptor.name, descriptor.base_path)
