"""BizDesk - Classify driver errors into client-safe descriptions."""
import re
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

DUPLICATE_VALUE = "duplicate_value"
REQUIRED_FIELD_MISSING = "required_field_missing"
FOREIGN_KEY_CONSTRAINT = "foreign_key_constraint"
DATA_TOO_LONG = "data_too_long"
DATA_TYPE_MISMATCH = "data_type_mismatch"
DATABASE_ERROR = "database_error"


@dataclass(frozen=True)
class ParsedDatabaseError:
    error_type: str
    message: str
    field: str | None
    suggestion: str

    def as_detail(self) -> dict:
        return {"field": self.field, "error_type": self.error_type, "suggestion": self.suggestion}


# PostgreSQL, SQLite and MySQL spellings
_DUPLICATE_FIELD = (
    re.compile(r"Key \((?P<field>[\w, ]+)\)=\((?P<value>.*?)\)"),
    re.compile(r"UNIQUE constraint failed: \w+\.(?P<field>\w+)"),
    re.compile(r"for key '(?:\w+\.)?\w*?_(?P<field>\w+)_unique'"),
)
_NOT_NULL_FIELD = (
    re.compile(r'null value in column "(?P<field>\w+)"'),
    re.compile(r"NOT NULL constraint failed: \w+\.(?P<field>\w+)"),
    re.compile(r"Column '(?P<field>\w+)' cannot be null"),
    re.compile(r"Field '(?P<field>\w+)' doesn't have a default value"),
)
_TOO_LONG_FIELD = (
    re.compile(r"Data too long for column '(?P<field>\w+)'"),
)


def _search(patterns: tuple[re.Pattern, ...], text: str) -> re.Match | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def parse_database_error(exc: SQLAlchemyError) -> ParsedDatabaseError:
    raw = str(getattr(exc, "orig", None) or exc)
    lowered = raw.lower()

    if "unique constraint" in lowered or "duplicate" in lowered:
        match = _search(_DUPLICATE_FIELD, raw)
        field = match.group("field") if match else None
        return ParsedDatabaseError(
            DUPLICATE_VALUE,
            "Duplicate value",
            field,
            f"Use a unique value for '{field}'" if field else "Use a unique value",
        )

    if "not null" in lowered or "null value in column" in lowered or "cannot be null" in lowered \
            or "doesn't have a default value" in lowered:
        match = _search(_NOT_NULL_FIELD, raw)
        field = match.group("field") if match else None
        return ParsedDatabaseError(
            REQUIRED_FIELD_MISSING,
            "Required field missing",
            field,
            f"Provide a value for the '{field}' field" if field else "Provide all required fields",
        )

    if "foreign key" in lowered:
        return ParsedDatabaseError(
            FOREIGN_KEY_CONSTRAINT,
            "Foreign key constraint violation",
            None,
            "Check that referenced IDs exist in related tables",
        )

    if "too long" in lowered:
        match = _search(_TOO_LONG_FIELD, raw)
        field = match.group("field") if match else None
        return ParsedDatabaseError(
            DATA_TOO_LONG,
            "Data too long",
            field,
            f"Reduce the length of data for field '{field}'" if field else "Reduce the length of the data",
        )

    if "invalid input syntax" in lowered or "incorrect" in lowered or "datatype mismatch" in lowered:
        return ParsedDatabaseError(
            DATA_TYPE_MISMATCH,
            "Data type mismatch",
            None,
            "Provide values of the expected type",
        )

    return ParsedDatabaseError(
        DATABASE_ERROR,
        "Database operation failed",
        None,
        "Check the data format and constraints",
    )
