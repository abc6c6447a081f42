"""Database error classification tests."""
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.services.db_error_parser import (
    DATA_TOO_LONG,
    DATABASE_ERROR,
    DUPLICATE_VALUE,
    FOREIGN_KEY_CONSTRAINT,
    REQUIRED_FIELD_MISSING,
    parse_database_error,
)


def integrity(message: str) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, Exception(message))


class TestParseDatabaseError:

    @pytest.mark.parametrize("message, field", [
        ("UNIQUE constraint failed: products.slug", "slug"),
        ('duplicate key value violates unique constraint "products_slug_key"\n'
         "DETAIL:  Key (slug)=(widget) already exists.", "slug"),
        ("Duplicate entry 'widget' for key 'products.products_slug_unique'", "slug"),
    ])
    def test_duplicate(self, message, field):
        parsed = parse_database_error(integrity(message))

        assert parsed.error_type == DUPLICATE_VALUE
        assert parsed.field == field
        assert parsed.suggestion == f"Use a unique value for '{field}'"

    @pytest.mark.parametrize("message", [
        "NOT NULL constraint failed: products.name",
        'null value in column "name" of relation "products" violates not-null constraint',
        "Column 'name' cannot be null",
    ])
    def test_required_field(self, message):
        parsed = parse_database_error(integrity(message))

        assert parsed.error_type == REQUIRED_FIELD_MISSING
        assert parsed.field == "name"
        assert parsed.as_detail() == {
            "field": "name",
            "error_type": REQUIRED_FIELD_MISSING,
            "suggestion": "Provide a value for the 'name' field",
        }

    def test_foreign_key(self):
        parsed = parse_database_error(integrity("FOREIGN KEY constraint failed"))
        assert parsed.error_type == FOREIGN_KEY_CONSTRAINT

    def test_too_long(self):
        parsed = parse_database_error(integrity("Data too long for column 'sku' at row 1"))

        assert parsed.error_type == DATA_TOO_LONG
        assert parsed.field == "sku"

    def test_unclassified(self):
        parsed = parse_database_error(OperationalError("SELECT 1", {}, Exception("disk I/O error")))

        assert parsed.error_type == DATABASE_ERROR
        assert parsed.field is None
