"""Resource registry tests: descriptor building and discovery."""
import logging
import sys
import textwrap

import pytest
from sqlalchemy import JSON, Boolean, Date, Enum, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.models import Estimate, Product, User
from app.resources.registry import (
    RESOURCE_MARKER,
    FieldCast,
    ResourceRegistry,
    api_resource,
    build_descriptor,
    cast_from_column_type,
    discover_resources,
    kebab_case,
    pluralize,
)


class _Base(DeclarativeBase):
    pass


@api_resource()
class SalesChannel(_Base):
    __tablename__ = "sales_channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(80), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


@api_resource(uri="/custom-path/", version="v2")
class Category(_Base):
    __tablename__ = "categories"
    __fillable__ = ("name",)
    __hidden__ = ("secret",)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50))
    secret: Mapped[str | None] = mapped_column(String(50))


def describe(cls):
    return build_descriptor(cls, getattr(cls, RESOURCE_MARKER))


class TestNaming:

    @pytest.mark.parametrize("word, plural", [
        ("product", "products"), ("category", "categories"), ("box", "boxes"), ("day", "days"),
    ])
    def test_pluralize(self, word, plural):
        assert pluralize(word) == plural

    def test_kebab_case(self):
        assert kebab_case("SalesChannel") == "sales-channel"


class TestCasts:

    @pytest.mark.parametrize("column_type, cast", [
        (Integer(), FieldCast.INTEGER),
        (Boolean(), FieldCast.BOOLEAN),
        (Numeric(10, 2), FieldCast.DECIMAL),
        (Float(), FieldCast.FLOAT),
        (JSON(), FieldCast.ARRAY),
        (Date(), FieldCast.DATE),
        (String(10), None),
        (Text(), None),
        (Enum("a", "b", native_enum=False), None),
    ])
    def test_cast_from_column_type(self, column_type, cast):
        assert cast_from_column_type(column_type) is cast

    @pytest.mark.parametrize("raw, cast", [
        ("decimal:2", FieldCast.DECIMAL), ("bool", FieldCast.BOOLEAN), ("json", FieldCast.ARRAY),
    ])
    def test_parse_aliases(self, raw, cast):
        assert FieldCast.parse(raw) is cast

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            FieldCast.parse("uuid")


class TestBuildDescriptor:

    def test_defaults_from_class(self):
        d = describe(SalesChannel)

        assert d.name == "sales_channel"
        assert d.uri == "sales-channels"
        assert d.base_path == "/api/v1/sales-channels"
        assert [f.name for f in d.fillable_fields] == ["title", "enabled"]
        assert d.sortable == ("id",)
        enabled = d.get_field("enabled")
        assert enabled.cast is FieldCast.BOOLEAN
        assert enabled.default is True
        assert d.get_field("title").max_length == 80

    def test_explicit_uri_and_hidden(self):
        d = describe(Category)

        assert d.uri == "custom-path"
        assert d.version == "v2"
        assert d.hidden == frozenset({"secret"})
        assert [f.name for f in d.fillable_fields] == ["name"]

    def test_unknown_declared_field(self):
        class Broken(_Base):
            __tablename__ = "broken"
            __searchable__ = ("missing",)
            id: Mapped[int] = mapped_column(Integer, primary_key=True)

        with pytest.raises(ValueError, match="unknown fields: missing"):
            build_descriptor(Broken, api_resource()(Broken).__api_resource__)

    def test_unmapped_class(self):
        class Plain:
            pass

        with pytest.raises(ValueError):
            build_descriptor(Plain, api_resource()(Plain).__api_resource__)

    def test_product_descriptor(self):
        d = describe(Product)

        assert {f.name for f in d.fields if f.required} == {"name", "slug"}
        assert d.searchable == ("name", "slug", "sku")
        assert d.get_field("type").choices == ("simple", "variable", "grouped", "external")
        assert d.get_field("cost").cast is FieldCast.DECIMAL
        assert d.get_field("images").cast is FieldCast.ARRAY
        assert d.get_field("brand").default == "ASENSAR"
        assert "price" in d.sortable and "cost" not in d.sortable

    def test_estimate_casts_override_column_types(self):
        d = describe(Estimate)

        assert d.get_field("customer_id").cast is FieldCast.STRING
        assert d.get_field("grand_total").cast is FieldCast.FLOAT
        assert d.get_field("date").cast is FieldCast.DATE

    def test_descriptor_config_is_frozen(self):
        d = describe(User)

        with pytest.raises(TypeError):
            d.filters["role"] = {}


class TestDiscovery:

    def test_discovers_shipped_models(self):
        registry = discover_resources()

        assert isinstance(registry, ResourceRegistry)
        assert sorted(registry) == ["estimate", "product", "user"]
        assert registry["user"].hidden == frozenset({"password"})
        assert registry["estimate"].model is Estimate
        assert "nothing" not in registry

    def test_prefix_and_version_defaults(self):
        registry = discover_resources(default_prefix="rest", default_version="v9")
        assert registry["product"].base_path == "/rest/v9/products"

    def test_skips_broken_entries_and_keeps_going(self, models_package, caplog):
        package = models_package({
            "a_broken": """
                @api_resource()
                class Gadget(Base):
                    __tablename__ = "gadgets"
                    __searchable__ = ("nope",)
                    id: Mapped[int] = mapped_column(Integer, primary_key=True)
            """,
            "b_failing": """
                raise RuntimeError("cannot import")
            """,
            "c_supplier": """
                @api_resource()
                class Supplier(Base):
                    __tablename__ = "suppliers"
                    id: Mapped[int] = mapped_column(Integer, primary_key=True)
                    name: Mapped[str] = mapped_column(String(80))
            """,
            "d_duplicate": """
                @api_resource(uri="suppliers")
                class Vendor(Base):
                    __tablename__ = "vendors"
                    id: Mapped[int] = mapped_column(Integer, primary_key=True)
            """,
        })

        with caplog.at_level(logging.WARNING, logger="app.resources.registry"):
            registry = discover_resources(package)

        assert list(registry) == ["supplier"]
        messages = [record.getMessage() for record in caplog.records]
        assert "Skipping API resource Gadget: Gadget declares unknown fields: nope" in messages
        assert f"Failed to import model module {package}.b_failing" in messages
        assert "Skipping duplicate API resource Vendor (/api/v1/suppliers)" in messages

    def test_empty_package_warns(self, models_package, caplog):
        package = models_package({})

        with caplog.at_level(logging.WARNING, logger="app.resources.registry"):
            registry = discover_resources(package)

        assert len(registry) == 0
        assert f"No API resources registered from {package}" in caplog.messages


MODEL_HEADER = """\
from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.resources.registry import api_resource


class Base(DeclarativeBase):
    pass
"""


@pytest.fixture
def models_package(tmp_path, monkeypatch, request):
    """Write a throwaway models package under tmp_path and return its import name."""
    name = f"scratch_models_{request.node.name.replace('[', '_').replace(']', '_')}"

    def build(modules: dict[str, str]) -> str:
        package_dir = tmp_path / name
        package_dir.mkdir()
        (package_dir / "__init__.py").write_text("")
        for module_name, body in modules.items():
            (package_dir / f"{module_name}.py").write_text(MODEL_HEADER + textwrap.dedent(body))
        monkeypatch.syspath_prepend(str(tmp_path))
        return name

    yield build
    for module_name in [m for m in sys.modules if m == name or m.startswith(f"{name}.")]:
        del sys.modules[module_name]
