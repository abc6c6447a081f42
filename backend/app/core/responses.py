"""BizDesk - Response envelope builders.

Every endpoint answers with the same JSON shape:

    {success, message?, data?, pagination?, search, sort?, filters, schema,
     columns?, notifications, meta?}

or, on failure, ``{success: false, message, error: {code, details, validation_errors?}}``.
"""
from typing import Any
from urllib.parse import urlencode

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.schemas.common import Page

DEFAULT_COLUMNS: dict[str, dict[str, Any]] = {
    "id": {"label": "ID", "sortable": True, "clickable": True, "search": True},
}

_PAGING_PARAMS = ("page", "per_page")


def default_columns() -> dict[str, dict[str, Any]]:
    return {key: dict(value) for key, value in DEFAULT_COLUMNS.items()}


def build_pagination(page: Page) -> dict[str, Any]:
    total_pages = page.total_pages
    url_query = {k: v for k, v in page.query.items() if k not in _PAGING_PARAMS}
    return {
        "totalItems": page.total,
        "currentPage": page.page,
        "itemsPerPage": page.per_page,
        "totalPages": total_pages,
        "urlPath": page.path,
        "urlQuery": urlencode(url_query) if url_query else None,
        "nextPage": str(page.page + 1) if page.page < total_pages else None,
        "prevPage": str(page.page - 1) if page.page > 1 else None,
    }


def success_payload(
    data: Any = None,
    message: str | None = None,
    meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    meta = dict(meta or {})
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if "pagination" in meta:
        body["pagination"] = meta.pop("pagination")
    body["search"] = meta.pop("search", None)
    body["filters"] = meta.pop("filters", None)
    body["schema"] = meta.pop("schema", None)
    if "columns" in meta:
        body["columns"] = meta.pop("columns")
    elif isinstance(data, list) and data:
        body["columns"] = default_columns()
    body["notifications"] = meta.pop("notifications", None) or None
    if meta:
        body["meta"] = meta
    return body


def paginated_payload(
    page: Page,
    meta: dict[str, Any] | None = None,
    message: str | None = None,
) -> dict[str, Any]:
    meta = dict(meta or {})
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body["data"] = page.items
    body["pagination"] = build_pagination(page)
    body["search"] = meta.pop("search", None)
    body["sort"] = meta.pop("sort", None)
    body["filters"] = meta.pop("filters", None)
    body["schema"] = meta.pop("schema", None)
    body["columns"] = meta.pop("columns", None) or default_columns()
    body["notifications"] = meta.pop("notifications", None) or None
    if meta:
        body["meta"] = meta
    return body


def error_payload(
    code: str,
    message: str,
    details: list[Any] | None = None,
    validation_errors: dict[str, list[str]] | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "details": details or []}
    if validation_errors:
        error["validation_errors"] = validation_errors
    return {"success": False, "message": message, "error": error}


def success_response(
    data: Any = None,
    message: str | None = None,
    status_code: int = 200,
    meta: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(success_payload(data, message, meta)))


def paginated_response(
    page: Page,
    meta: dict[str, Any] | None = None,
    message: str | None = None,
) -> JSONResponse:
    return JSONResponse(status_code=200, content=jsonable_encoder(paginated_payload(page, meta, message)))


def error_response(
    code: str,
    message: str,
    status_code: int,
    details: list[Any] | None = None,
    validation_errors: dict[str, list[str]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(error_payload(code, message, details, validation_errors)),
        headers=headers,
    )
