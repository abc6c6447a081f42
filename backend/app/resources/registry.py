"""BizDesk - API resource descriptors and the startup registry.

Models opt in with the ``@api_resource`` decorator. ``discover_resources`` scans
the models package once, turns every marked class into an immutable
``ResourceDescriptor`` and returns a read-only ``ResourceRegistry``.
"""
import importlib
import inspect
import logging
import pkgutil
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

import sqlalchemy as sa
from sqlalchemy.exc import NoInspectionAvailable

logger = logging.getLogger(__name__)

RESOURCE_MARKER = "__api_resource__"
TIMESTAMP_FIELDS = ("created_at", "updated_at")


class FieldCast(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DECIMAL = "decimal"
    FLOAT = "float"
    ARRAY = "array"
    DATETIME = "datetime"
    DATE = "date"

    @classmethod
    def parse(cls, raw: "str | FieldCast") -> "FieldCast":
        """Parse a cast spelling such as ``decimal:2`` or ``bool``."""
        if isinstance(raw, FieldCast):
            return raw
        name = raw.split(":", 1)[0].strip().lower()
        try:
            return _CAST_ALIASES[name]
        except KeyError:
            raise ValueError(f"Unsupported cast '{raw}'") from None


_CAST_ALIASES: dict[str, FieldCast] = {
    "string": FieldCast.STRING,
    "str": FieldCast.STRING,
    "integer": FieldCast.INTEGER,
    "int": FieldCast.INTEGER,
    "boolean": FieldCast.BOOLEAN,
    "bool": FieldCast.BOOLEAN,
    "decimal": FieldCast.DECIMAL,
    "float": FieldCast.FLOAT,
    "double": FieldCast.FLOAT,
    "real": FieldCast.FLOAT,
    "array": FieldCast.ARRAY,
    "json": FieldCast.ARRAY,
    "object": FieldCast.ARRAY,
    "collection": FieldCast.ARRAY,
    "datetime": FieldCast.DATETIME,
    "timestamp": FieldCast.DATETIME,
    "date": FieldCast.DATE,
}


def cast_from_column_type(column_type: sa.types.TypeEngine) -> FieldCast | None:
    """Derive a cast from the mapped column type. Plain strings carry none."""
    if isinstance(column_type, sa.Boolean):
        return FieldCast.BOOLEAN
    if isinstance(column_type, sa.Integer):
        return FieldCast.INTEGER
    # Float subclasses Numeric
    if isinstance(column_type, sa.Float):
        return FieldCast.FLOAT
    if isinstance(column_type, sa.Numeric):
        return FieldCast.DECIMAL
    if isinstance(column_type, sa.JSON):
        return FieldCast.ARRAY
    if isinstance(column_type, sa.DateTime):
        return FieldCast.DATETIME
    if isinstance(column_type, sa.Date):
        return FieldCast.DATE
    return None


@dataclass(frozen=True)
class ApiResource:
    """Marker attached to a model class by ``@api_resource``."""

    uri: str | None = None
    api_prefix: str | None = None
    version: str | None = None


def api_resource(uri: str | None = None, *, api_prefix: str | None = None, version: str | None = None):
    """Expose a model through the generic resource API."""

    def decorator(cls):
        setattr(cls, RESOURCE_MARKER, ApiResource(uri=uri, api_prefix=api_prefix, version=version))
        return cls

    return decorator


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    cast: FieldCast | None
    nullable: bool = True
    unique: bool = False
    fillable: bool = True
    required: bool = False
    default: Any = None
    max_length: int | None = None
    choices: tuple[str, ...] | None = None


@dataclass(frozen=True)
class ResourceDescriptor:
    model: type
    name: str
    uri: str
    api_prefix: str
    version: str
    fields: tuple[FieldDescriptor, ...]
    primary_key: str = "id"
    hidden: frozenset[str] = frozenset()
    searchable: tuple[str, ...] = ()
    sortable: tuple[str, ...] = ()
    filters: Mapping[str, Mapping[str, Any]] = field(default_factory=lambda: MappingProxyType({}))
    index_columns: Mapping[str, Mapping[str, Any]] | None = None
    api_schema: Any = None

    @property
    def base_path(self) -> str:
        return f"/{self.api_prefix}/{self.version}/{self.uri}"

    @property
    def fillable_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.fields if f.fillable)

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    def get_field(self, name: str) -> FieldDescriptor | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def column(self, name: str) -> Any:
        return getattr(self.model, name)


def kebab_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()


def snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def pluralize(word: str) -> str:
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _scalar_default(column: sa.Column) -> Any:
    default = column.default
    if default is not None and getattr(default, "is_scalar", False):
        return default.arg
    return None


def build_descriptor(
    cls: type,
    marker: ApiResource,
    *,
    default_prefix: str = "api",
    default_version: str = "v1",
) -> ResourceDescriptor:
    """Build the descriptor for one marked model. Raises ValueError if malformed."""
    try:
        mapper = sa.inspect(cls)
    except NoInspectionAvailable:
        raise ValueError(f"{cls.__name__} is not a mapped model") from None

    columns = {attr.key: attr.columns[0] for attr in mapper.column_attrs}
    primary_keys = [col.key for col in mapper.primary_key]
    if len(primary_keys) != 1:
        raise ValueError(f"{cls.__name__} must have exactly one primary key column")
    primary_key = primary_keys[0]

    fillable = getattr(cls, "__fillable__", None)
    if fillable is None:
        fillable = tuple(k for k in columns if k != primary_key and k not in TIMESTAMP_FIELDS)
    casts = {name: FieldCast.parse(raw) for name, raw in getattr(cls, "__casts__", {}).items()}
    required = set(getattr(cls, "__required__", ()))
    hidden = frozenset(getattr(cls, "__hidden__", ()))
    searchable = tuple(getattr(cls, "__searchable__", ()))
    filters = dict(getattr(cls, "__api_filters__", {}))
    index_columns = getattr(cls, "__index_columns__", None)

    declared = set(fillable) | required | set(casts) | hidden | set(searchable) | set(filters)
    unknown = sorted(declared - set(columns))
    if unknown:
        raise ValueError(f"{cls.__name__} declares unknown fields: {', '.join(unknown)}")

    fields = []
    for name, column in columns.items():
        column_type = column.type
        fields.append(
            FieldDescriptor(
                name=name,
                cast=casts.get(name, cast_from_column_type(column_type)),
                nullable=bool(column.nullable),
                unique=bool(column.unique) or column.primary_key,
                fillable=name in fillable,
                required=name in required,
                default=_scalar_default(column),
                max_length=getattr(column_type, "length", None),
                choices=tuple(column_type.enums) if isinstance(column_type, sa.Enum) else None,
            )
        )

    sortable = [primary_key, "created_at"]
    if index_columns:
        sortable.extend(name for name, conf in index_columns.items() if conf.get("sortable"))
    sortable.extend(getattr(cls, "__sortable__", ()))
    sortable = tuple(dict.fromkeys(name for name in sortable if name in columns))

    return ResourceDescriptor(
        model=cls,
        name=snake_case(cls.__name__),
        uri=(marker.uri or pluralize(kebab_case(cls.__name__))).strip("/"),
        api_prefix=(marker.api_prefix or default_prefix).strip("/"),
        version=(marker.version or default_version).strip("/"),
        fields=tuple(fields),
        primary_key=primary_key,
        hidden=hidden,
        searchable=searchable,
        sortable=sortable,
        filters=_freeze(filters),
        index_columns=_freeze(index_columns) if index_columns else None,
        api_schema=_freeze(getattr(cls, "__api_schema__", None)),
    )


class ResourceRegistry(Mapping[str, ResourceDescriptor]):
    """Read-only mapping of resource name to descriptor."""

    def __init__(self, descriptors: Mapping[str, ResourceDescriptor] | None = None):
        self._descriptors = MappingProxyType(dict(descriptors or {}))

    def __getitem__(self, name: str) -> ResourceDescriptor:
        return self._descriptors[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)


def discover_resources(
    package: str = "app.models",
    *,
    default_prefix: str = "api",
    default_version: str = "v1",
) -> ResourceRegistry:
    """Import every module under ``package`` and register marked models."""
    pkg = importlib.import_module(package)
    descriptors: dict[str, ResourceDescriptor] = {}
    seen_paths: set[str] = set()

    for module_info in pkgutil.iter_modules(pkg.__path__, prefix=f"{package}."):
        try:
            module = importlib.import_module(module_info.name)
        except Exception:
            logger.exception("Failed to import model module %s", module_info.name)
            continue

        for _, cls in inspect.getmembers(module, inspect.isclass):
            marker = cls.__dict__.get(RESOURCE_MARKER)
            if marker is None or cls.__module__ != module.__name__:
                continue
            try:
                descriptor = build_descriptor(
                    cls, marker, default_prefix=default_prefix, default_version=default_version
                )
            except Exception as exc:
                logger.warning("Skipping API resource %s: %s", cls.__name__, exc)
                continue
            if descriptor.name in descriptors or descriptor.base_path in seen_paths:
                logger.warning("Skipping duplicate API resource %s (%s)", cls.__name__, descriptor.base_path)
                continue
            descriptors[descriptor.name] = descriptor
            seen_paths.add(descriptor.base_path)
            logger.debug("Registered API resource %s at %s", descriptor.name, descriptor.base_path)

    if not descriptors:
        logger.warning("No API resources registered from %s", package)
    return ResourceRegistry(descriptors)
