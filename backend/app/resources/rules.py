"""BizDesk - Validation rules synthesized from resource field descriptors."""
import re
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from email_validator import EmailNotValidError, validate_email

from app.core.errors import ResourceValidationError
from app.core.security import get_password_hash
from app.resources.registry import FieldCast, ResourceDescriptor


class Operation(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class RuleKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NUMERIC = "numeric"
    ARRAY = "array"
    DATE = "date"
    DATE_YMD = "date_ymd"
    EMAIL = "email"
    PASSWORD = "password"


CAST_RULES: dict[FieldCast, RuleKind] = {
    FieldCast.STRING: RuleKind.STRING,
    FieldCast.INTEGER: RuleKind.INTEGER,
    FieldCast.BOOLEAN: RuleKind.BOOLEAN,
    FieldCast.DECIMAL: RuleKind.NUMERIC,
    FieldCast.FLOAT: RuleKind.NUMERIC,
    FieldCast.ARRAY: RuleKind.ARRAY,
    FieldCast.DATETIME: RuleKind.DATE,
    FieldCast.DATE: RuleKind.DATE_YMD,
}

PASSWORD_MIN_LENGTH = 8

_INTEGER_HINTS = ("quantity", "count", "number", "threshold")
_NUMERIC_HINTS = ("price", "cost", "amount", "rate", "weight", "length", "width", "height")
_BOOLEAN_HINTS = ("enabled", "active", "track", "required", "taxable", "inclusive")
_ARRAY_NAMES = ("categories", "tags", "attributes", "variations", "images", "meta_data")

_INT_RE = re.compile(r"^[+-]?\d+$")
_YMD_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TRUE_STRINGS = ("1", "true")
_FALSE_STRINGS = ("0", "false")


@dataclass(frozen=True)
class FieldRule:
    field: str
    kind: RuleKind
    required: bool = False
    nullable: bool = True
    unique: bool = False
    min_length: int | None = None
    max_length: int | None = None
    choices: tuple[str, ...] | None = None


def infer_kind(field_name: str) -> RuleKind:
    """Guess a rule from the field name when no cast is declared."""
    name = field_name.lower()
    if any(hint in name for hint in _INTEGER_HINTS) and not name.endswith("_ids"):
        return RuleKind.INTEGER
    if name.endswith("_id"):
        return RuleKind.INTEGER
    if any(hint in name for hint in _NUMERIC_HINTS):
        return RuleKind.NUMERIC
    if any(hint in name for hint in _BOOLEAN_HINTS):
        return RuleKind.BOOLEAN
    if name.endswith("_ids") or name in _ARRAY_NAMES:
        return RuleKind.ARRAY
    return RuleKind.STRING


def synthesize_rules(descriptor: ResourceDescriptor, operation: Operation) -> dict[str, FieldRule]:
    """Build the rule set for every fillable field of a resource."""
    rules: dict[str, FieldRule] = {}
    for f in descriptor.fillable_fields:
        name = f.name.lower()
        required = operation is Operation.CREATE and f.required
        if "password" in name:
            rule = FieldRule(f.name, RuleKind.PASSWORD, required=required, min_length=PASSWORD_MIN_LENGTH)
        elif "email" in name:
            rule = FieldRule(f.name, RuleKind.EMAIL, required=required, unique=True, max_length=f.max_length)
        else:
            kind = CAST_RULES[f.cast] if f.cast is not None else infer_kind(f.name)
            rule = FieldRule(
                f.name,
                kind,
                required=required,
                max_length=f.max_length if kind is RuleKind.STRING else None,
                choices=f.choices,
            )
        if required:
            rule = replace(rule, nullable=False)
        rules[f.name] = rule
    return rules


def _label(field_name: str) -> str:
    return field_name.replace("_", " ")


def _coerce_value(rule: FieldRule, val: Any) -> Any:
    """Coerce one non-null input to the rule's type. Raises ValueError with a user message."""
    label = _label(rule.field)
    kind = rule.kind

    if kind in (RuleKind.STRING, RuleKind.PASSWORD, RuleKind.EMAIL) and not isinstance(val, str):
        raise ValueError(f"The {label} field must be a string.")

    if kind is RuleKind.STRING:
        if rule.max_length and len(val) > rule.max_length:
            raise ValueError(f"The {label} field must not be greater than {rule.max_length} characters.")
        if rule.choices and val not in rule.choices:
            raise ValueError(f"The selected {label} is invalid.")
        return val

    if kind is RuleKind.PASSWORD:
        if len(val) < (rule.min_length or 0):
            raise ValueError("Password must be at least 8 characters long.")
        return val

    if kind is RuleKind.EMAIL:
        try:
            validate_email(val, check_deliverability=False)
        except EmailNotValidError:
            raise ValueError("Please provide a valid email address.") from None
        if rule.max_length and len(val) > rule.max_length:
            raise ValueError(f"The {label} field must not be greater than {rule.max_length} characters.")
        return val

    if kind is RuleKind.INTEGER:
        if isinstance(val, bool):
            raise ValueError(f"The {label} field must be an integer.")
        if isinstance(val, int):
            return val
        if isinstance(val, float) and val.is_integer():
            return int(val)
        if isinstance(val, str) and _INT_RE.match(val.strip()):
            return int(val.strip())
        raise ValueError(f"The {label} field must be an integer.")

    if kind is RuleKind.BOOLEAN:
        if isinstance(val, bool):
            return val
        if isinstance(val, int) and val in (0, 1):
            return bool(val)
        if isinstance(val, str) and val.strip().lower() in _TRUE_STRINGS:
            return True
        if isinstance(val, str) and val.strip().lower() in _FALSE_STRINGS:
            return False
        raise ValueError(f"The {label} field must be true or false.")

    if kind is RuleKind.NUMERIC:
        if isinstance(val, bool) or not isinstance(val, (int, float, str, Decimal)):
            raise ValueError(f"The {label} field must be a number.")
        try:
            number = Decimal(str(val).strip())
        except InvalidOperation:
            raise ValueError(f"The {label} field must be a number.") from None
        if not number.is_finite():
            raise ValueError(f"The {label} field must be a number.")
        return number

    if kind is RuleKind.ARRAY:
        if not isinstance(val, (list, dict)):
            raise ValueError(f"The {label} field must be an array.")
        return val

    if kind is RuleKind.DATE:
        if isinstance(val, str):
            text = val.strip()
            try:
                return datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                pass
        raise ValueError(f"The {label} field must be a valid date.")

    if kind is RuleKind.DATE_YMD:
        if isinstance(val, str) and _YMD_RE.match(val.strip()):
            try:
                return date.fromisoformat(val.strip())
            except ValueError:
                pass
        raise ValueError(f"The {label} field must match the format Y-m-d.")

    raise ValueError(f"Unsupported rule for {label}")


def validate_payload(rules: dict[str, FieldRule], payload: dict[str, Any]) -> dict[str, Any]:
    """
    Validate a request payload against synthesized rules.
    Unknown keys are ignored; blank strings count as null; null or blank
    passwords are dropped. Returns the cast values. Raises ResourceValidationError.
    """
    field_errors: dict[str, list[str]] = {}
    result: dict[str, Any] = {}

    for name, rule in rules.items():
        if name not in payload:
            if rule.required:
                field_errors[name] = [f"The {_label(name)} field is required."]
            continue

        val = payload[name]
        if isinstance(val, str) and val.strip() == "":
            val = None

        if val is None:
            if rule.required:
                field_errors[name] = [f"The {_label(name)} field is required."]
            elif rule.kind is not RuleKind.PASSWORD:
                result[name] = None
            continue

        try:
            result[name] = _coerce_value(rule, val)
        except ValueError as e:
            field_errors[name] = [str(e)]

    if field_errors:
        raise ResourceValidationError(field_errors)

    return result


def hash_passwords(rules: dict[str, FieldRule], values: dict[str, Any]) -> dict[str, Any]:
    """Replace plaintext password values with bcrypt hashes."""
    hashed = dict(values)
    for name, rule in rules.items():
        if rule.kind is RuleKind.PASSWORD and hashed.get(name):
            hashed[name] = get_password_hash(hashed[name])
    return hashed
