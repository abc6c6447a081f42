"""BizDesk - Column defaults for explicit nulls in write payloads."""
import logging
from typing import Any

from app.resources.registry import ResourceDescriptor

logger = logging.getLogger(__name__)


def apply_database_defaults(
    descriptor: ResourceDescriptor,
    values: dict[str, Any],
    operation: str,
) -> dict[str, Any]:
    """
    Replace an explicit null on a NOT NULL column with the column's scalar default.
    Fields missing from ``values`` are left to the database.
    """
    result = dict(values)
    applied: dict[str, Any] = {}
    for field in descriptor.fillable_fields:
        if field.name not in result or result[field.name] is not None:
            continue
        if field.nullable or field.default is None:
            continue
        result[field.name] = field.default
        applied[field.name] = field.default

    if applied:
        logger.info(
            "Database defaults applied during %s for %s: %s",
            operation, descriptor.name, applied,
        )
    return result
