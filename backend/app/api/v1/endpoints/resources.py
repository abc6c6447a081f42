"""BizDesk - Generic resource controller.

One ``ResourceController`` is bound per registered resource; its handlers serve
index/show/store/update/destroy plus the schema and columns metadata.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse

from app.api.deps import DbSession, JsonPayload
from app.config import get_settings
from app.core.errors import NotFoundError
from app.core.responses import paginated_response, success_response
from app.resources.defaults import apply_database_defaults
from app.resources.metadata import build_columns, build_schema
from app.resources.params import (
    clamp_page,
    filters_meta,
    parse_filter,
    parse_pagination,
    parse_search,
    parse_sort,
)
from app.resources.registry import ResourceDescriptor
from app.resources.rules import Operation, hash_passwords, synthesize_rules, validate_payload
from app.schemas.common import Page
from app.services.resource_service import ResourceService

settings = get_settings()


class ResourceController:
    """CRUD handlers parameterized by a resource descriptor."""

    def __init__(self, descriptor: ResourceDescriptor):
        self.descriptor = descriptor
        self.create_rules = synthesize_rules(descriptor, Operation.CREATE)
        self.update_rules = synthesize_rules(descriptor, Operation.UPDATE)

    async def _get_or_404(self, db: DbSession, id: str):
        record = await ResourceService.get_by_id(db, self.descriptor, id)
        if record is None:
            raise NotFoundError(f"Resource with ID '{id}' not found")
        return record

    async def index(self, request: Request, db: DbSession) -> JSONResponse:
        """List records: paginated, sorted, filtered and searched."""
        d = self.descriptor
        params = request.query_params

        (page, per_page), notifications = parse_pagination(
            params.get("page"),
            params.get("per_page"),
            default_per_page=settings.DEFAULT_PER_PAGE,
            max_per_page=settings.MAX_PER_PAGE,
        )
        sort, sort_notes = parse_sort(d, params.get("sort"), params.get("dir"))
        applied_filter, filter_notes = parse_filter(d, params.get("filter"))
        search, search_notes = parse_search(d, params.get("search"))
        notifications += sort_notes + filter_notes + search_notes

        q = ResourceService.build_list_query(d, applied_filter=applied_filter, search=search)
        total = await ResourceService.count(db, q)
        page, clamp_notes = clamp_page(page, total, per_page)
        notifications += clamp_notes
        records = await ResourceService.fetch_page(db, d, q, sort, page, per_page)

        result = Page(
            items=[ResourceService.serialize(d, r) for r in records],
            total=total,
            page=page,
            per_page=per_page,
            path=request.url.path,
            query=dict(params),
        )
        return paginated_response(
            result,
            meta={
                "search": search,
                "sort": sort.as_meta(),
                "filters": filters_meta(d, applied_filter),
                "schema": build_schema(d),
                "columns": build_columns(d),
                "notifications": notifications,
            },
        )

    async def show(self, id: str, db: DbSession) -> JSONResponse:
        record = await self._get_or_404(db, id)
        return success_response(ResourceService.serialize(self.descriptor, record))

    async def store(self, payload: JsonPayload, db: DbSession) -> JSONResponse:
        d = self.descriptor
        values = validate_payload(self.create_rules, payload)
        await ResourceService.ensure_unique_emails(db, d, self.create_rules, values)
        values = apply_database_defaults(d, hash_passwords(self.create_rules, values), Operation.CREATE.value)
        record = await ResourceService.create(db, d, values)
        return success_response(
            ResourceService.serialize(d, record),
            "Resource created successfully",
            status.HTTP_201_CREATED,
        )

    async def update(self, id: str, payload: JsonPayload, db: DbSession) -> JSONResponse:
        d = self.descriptor
        record = await self._get_or_404(db, id)
        values = validate_payload(self.update_rules, payload)
        await ResourceService.ensure_unique_emails(
            db, d, self.update_rules, values, exclude_id=ResourceService.record_id(d, record)
        )
        values = apply_database_defaults(d, hash_passwords(self.update_rules, values), Operation.UPDATE.value)
        record = await ResourceService.update(db, d, record, values)
        return success_response(ResourceService.serialize(d, record), "Resource updated successfully")

    async def destroy(self, id: str, db: DbSession) -> JSONResponse:
        record = await self._get_or_404(db, id)
        await ResourceService.delete(db, self.descriptor, record)
        return success_response(None, "Resource deleted successfully")

    async def schema(self) -> JSONResponse:
        return success_response(build_schema(self.descriptor))

    async def columns(self) -> JSONResponse:
        return success_response(build_columns(self.descriptor))
