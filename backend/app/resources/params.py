"""BizDesk - List query parameter parsing.

Each parser returns ``(value, notifications)``. Bad input never raises; it
falls back to a safe value and explains the substitution in a warning.
"""
import math
import re
from dataclasses import dataclass
from typing import Any

from app.resources.registry import ResourceDescriptor
from app.schemas.common import Notification

DEFAULT_PER_PAGE = 15
MAX_PER_PAGE = 100
MIN_SEARCH_LENGTH = 2
SORT_DIRECTIONS = ("asc", "desc")

_INT_RE = re.compile(r"^[+-]?\d+$")

Notifications = list[Notification]


@dataclass(frozen=True)
class SortOrder:
    column: str
    direction: str
    requested: bool = False

    def as_meta(self) -> dict[str, str] | None:
        if not self.requested:
            return None
        return {"column": self.column, "dir": self.direction}


@dataclass(frozen=True)
class AppliedFilter:
    field: str
    value: str


def _to_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and _INT_RE.match(raw.strip()):
        return int(raw.strip())
    return None


def _blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and raw.strip() == "")


def parse_page(raw: Any) -> tuple[int, Notifications]:
    if _blank(raw):
        return 1, []
    page = _to_int(raw)
    if page is None or page < 1:
        return 1, [Notification.warning(f"Invalid page number '{raw}', using page 1")]
    return page, []


def parse_per_page(
    raw: Any,
    *,
    default: int = DEFAULT_PER_PAGE,
    maximum: int = MAX_PER_PAGE,
) -> tuple[int, Notifications]:
    if _blank(raw):
        return default, []
    per_page = _to_int(raw)
    if per_page is None:
        return default, [
            Notification.warning(f"Page size must be a positive integer. Using default value of {default}.")
        ]
    if per_page > maximum:
        return maximum, [
            Notification.warning(f"Page size exceeds maximum of {maximum}, using maximum {maximum}.")
        ]
    if per_page < 1:
        return 1, [Notification.warning("Page size below minimum of 1, using minimum 1.")]
    return per_page, []


def parse_pagination(
    raw_page: Any,
    raw_per_page: Any,
    *,
    default_per_page: int = DEFAULT_PER_PAGE,
    max_per_page: int = MAX_PER_PAGE,
) -> tuple[tuple[int, int], Notifications]:
    page, page_notes = parse_page(raw_page)
    per_page, size_notes = parse_per_page(raw_per_page, default=default_per_page, maximum=max_per_page)
    return (page, per_page), page_notes + size_notes


def clamp_page(page: int, total: int, per_page: int) -> tuple[int, Notifications]:
    """Pull a page number past the end back to the last page."""
    last_page = max(math.ceil(total / per_page), 1)
    if page > last_page:
        return last_page, [
            Notification.warning(
                f"Requested page {page} exceeds available pages. Showing page {last_page}."
            )
        ]
    return page, []


def parse_sort(descriptor: ResourceDescriptor, raw_sort: Any, raw_dir: Any) -> tuple[SortOrder, Notifications]:
    notes: Notifications = []
    default_column = descriptor.primary_key
    requested = not _blank(raw_sort) or not _blank(raw_dir)

    column = default_column
    if not _blank(raw_sort):
        candidate = str(raw_sort).strip()
        if candidate in descriptor.sortable:
            column = candidate
        else:
            notes.append(
                Notification.warning(f"Sort column '{candidate}' not found, using default '{default_column}'")
            )

    direction = "asc"
    if not _blank(raw_dir):
        candidate = str(raw_dir).strip().lower()
        if candidate in SORT_DIRECTIONS:
            direction = candidate
        else:
            notes.append(Notification.warning(f"Sort direction '{raw_dir}' not recognized, using 'asc'"))

    return SortOrder(column=column, direction=direction, requested=requested), notes


def parse_filter(descriptor: ResourceDescriptor, raw: Any) -> tuple[AppliedFilter | None, Notifications]:
    if _blank(raw):
        return None, []
    if not descriptor.filters:
        return None, [Notification.warning("Filtering is not supported for this resource")]

    text = str(raw).strip()
    field, sep, value = text.partition(":")
    field, value = field.strip(), value.strip()
    if not sep or not field or not value:
        return None, [Notification.warning(f"Filter format '{text}' not recognized, filter ignored")]
    if field not in descriptor.filters:
        return None, [Notification.warning(f"Invalid filter field: {field}")]

    if value.lower() == "all":
        return None, []
    allowed = descriptor.filters[field].get("values")
    if allowed and value not in allowed:
        return None, [Notification.warning(f"Invalid filter value '{value}' for {field}, filter ignored")]
    return AppliedFilter(field=field, value=value), []


def filters_meta(descriptor: ResourceDescriptor, applied: AppliedFilter | None) -> dict[str, Any] | None:
    if not descriptor.filters:
        return None
    return {
        "applied": {"field": applied.field, "value": applied.value} if applied else None,
        "available": [
            {"field": name, "values": list(conf.get("values", ()))}
            for name, conf in descriptor.filters.items()
        ],
    }


def parse_search(descriptor: ResourceDescriptor, raw: Any) -> tuple[str | None, Notifications]:
    if _blank(raw):
        return None, []
    term = str(raw).strip()
    if not descriptor.searchable:
        return None, [Notification.warning("Search is not supported for this resource.")]
    if len(term) < MIN_SEARCH_LENGTH:
        return None, [
            Notification.warning(
                f"Search term too short (minimum {MIN_SEARCH_LENGTH} characters), search ignored"
            )
        ]
    return term, []
