"""BizDesk - ResourceService: generic CRUD over any registered resource."""
import logging
from typing import Any

import sqlalchemy as sa
from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ApiError, ConflictError, ErrorCode, ResourceValidationError
from app.resources.params import AppliedFilter, SortOrder
from app.resources.registry import FieldCast, ResourceDescriptor
from app.resources.rules import FieldRule, RuleKind
from app.services.db_error_parser import DUPLICATE_VALUE, parse_database_error

logger = logging.getLogger(__name__)

# Signed width of integer primary key columns
_INTEGER_BITS = ((sa.BigInteger, 64), (sa.SmallInteger, 16), (sa.Integer, 32))


def escape_like(term: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ResourceService:
    """List, fetch and write records of a resource inside one request transaction."""

    @staticmethod
    def build_list_query(
        descriptor: ResourceDescriptor,
        *,
        applied_filter: AppliedFilter | None = None,
        search: str | None = None,
    ) -> Select:
        q = select(descriptor.model)
        if applied_filter:
            q = q.where(descriptor.column(applied_filter.field) == applied_filter.value)
        if search and descriptor.searchable:
            search_term = f"%{escape_like(search)}%"
            q = q.where(or_(*(
                descriptor.column(name).ilike(search_term, escape="\\") for name in descriptor.searchable
            )))
        return q

    @staticmethod
    async def count(db: AsyncSession, q: Select) -> int:
        count_result = await db.execute(select(func.count()).select_from(q.order_by(None).subquery()))
        return count_result.scalar_one()

    @staticmethod
    async def fetch_page(
        db: AsyncSession,
        descriptor: ResourceDescriptor,
        q: Select,
        sort: SortOrder,
        page: int,
        per_page: int,
    ) -> list[Any]:
        column = descriptor.column(sort.column)
        order = column.desc() if sort.direction == "desc" else column.asc()
        q = q.order_by(order)
        if sort.column != descriptor.primary_key:
            q = q.order_by(descriptor.column(descriptor.primary_key).asc())
        q = q.offset((page - 1) * per_page).limit(per_page)
        result = await db.execute(q)
        return list(result.scalars().all())

    @staticmethod
    def coerce_id(descriptor: ResourceDescriptor, raw_id: str) -> Any | None:
        """Convert a path id to the primary key type; None when no record can match."""
        pk = descriptor.get_field(descriptor.primary_key)
        if pk is None or pk.cast is not FieldCast.INTEGER:
            return raw_id
        try:
            record_id = int(raw_id)
        except ValueError:
            return None
        column_type = sa.inspect(descriptor.model).columns[descriptor.primary_key].type
        for type_, bits in _INTEGER_BITS:
            if isinstance(column_type, type_):
                if not -(2 ** (bits - 1)) <= record_id < 2 ** (bits - 1):
                    return None
                break
        return record_id

    @staticmethod
    async def get_by_id(db: AsyncSession, descriptor: ResourceDescriptor, raw_id: str) -> Any | None:
        record_id = ResourceService.coerce_id(descriptor, raw_id)
        if record_id is None:
            return None
        return await db.get(descriptor.model, record_id)

    @staticmethod
    async def ensure_unique_emails(
        db: AsyncSession,
        descriptor: ResourceDescriptor,
        rules: dict[str, FieldRule],
        values: dict[str, Any],
        exclude_id: Any = None,
    ) -> None:
        """Reject email values already used by another record."""
        field_errors: dict[str, list[str]] = {}
        pk = descriptor.column(descriptor.primary_key)
        for name, rule in rules.items():
            if rule.kind is not RuleKind.EMAIL or not rule.unique or not values.get(name):
                continue
            q = select(pk).where(descriptor.column(name) == values[name])
            if exclude_id is not None:
                q = q.where(pk != exclude_id)
            result = await db.execute(q.limit(1))
            if result.scalar_one_or_none() is not None:
                field_errors[name] = ["This email address is already taken."]
        if field_errors:
            raise ResourceValidationError(field_errors)

    @staticmethod
    async def create(db: AsyncSession, descriptor: ResourceDescriptor, values: dict[str, Any]) -> Any:
        record = descriptor.model(**values)
        db.add(record)
        await ResourceService._commit(db, descriptor, "create")
        await db.refresh(record)
        logger.info("Resource created: %s id=%s", descriptor.name, ResourceService.record_id(descriptor, record))
        return record

    @staticmethod
    async def update(db: AsyncSession, descriptor: ResourceDescriptor, record: Any, values: dict[str, Any]) -> Any:
        for key, value in values.items():
            setattr(record, key, value)
        await ResourceService._commit(db, descriptor, "update")
        await db.refresh(record)
        logger.info(
            "Resource updated: %s id=%s fields=%s",
            descriptor.name, ResourceService.record_id(descriptor, record), sorted(values),
        )
        return record

    @staticmethod
    async def delete(db: AsyncSession, descriptor: ResourceDescriptor, record: Any) -> None:
        record_id = ResourceService.record_id(descriptor, record)
        await db.delete(record)
        await ResourceService._commit(db, descriptor, "delete")
        logger.info("Resource deleted: %s id=%s", descriptor.name, record_id)

    @staticmethod
    async def _commit(db: AsyncSession, descriptor: ResourceDescriptor, operation: str) -> None:
        try:
            await db.flush()
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            parsed = parse_database_error(exc)
            if parsed.error_type == DUPLICATE_VALUE:
                logger.warning(
                    "Duplicate value during %s of %s: field=%s", operation, descriptor.name, parsed.field
                )
                raise ConflictError(
                    "A record with the same value already exists.", details=[parsed.as_detail()]
                ) from exc
            logger.error(
                "Database error during %s of %s: type=%s field=%s",
                operation, descriptor.name, parsed.error_type, parsed.field,
                exc_info=exc,
            )
            raise ApiError(code=ErrorCode.INTERNAL_SERVER_ERROR) from exc

    @staticmethod
    def record_id(descriptor: ResourceDescriptor, record: Any) -> Any:
        return getattr(record, descriptor.primary_key)

    @staticmethod
    def serialize(descriptor: ResourceDescriptor, record: Any) -> dict[str, Any]:
        return {
            f.name: getattr(record, f.name)
            for f in descriptor.fields
            if f.name not in descriptor.hidden
        }
