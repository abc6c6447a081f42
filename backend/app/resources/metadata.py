"""BizDesk - Form schema and table column metadata for resources."""
from collections.abc import Mapping
from typing import Any

from app.resources.registry import FieldCast, FieldDescriptor, ResourceDescriptor

DEFAULT_GROUP = "General Information"
CURRENCY_PREFIX = "₹"

_CAST_INPUT_TYPES: dict[FieldCast, str] = {
    FieldCast.STRING: "text",
    FieldCast.INTEGER: "number",
    FieldCast.BOOLEAN: "checkbox",
    FieldCast.DECIMAL: "decimal",
    FieldCast.FLOAT: "number",
    FieldCast.ARRAY: "textarea",
    FieldCast.DATETIME: "datetime-local",
    FieldCast.DATE: "date",
}


def thaw(value: Any) -> Any:
    """Deep-copy frozen descriptor config into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


def detect_input_type(field: FieldDescriptor) -> str:
    if field.choices:
        return "select"
    if field.cast is not None:
        return _CAST_INPUT_TYPES[field.cast]

    name = field.name.lower()
    if "email" in name:
        return "email"
    if "password" in name:
        return "password"
    if name in ("phone", "mobile", "whatsapp", "tel"):
        return "tel"
    if name in ("url", "website", "link") or name.endswith("_url"):
        return "url"
    if name in ("color", "colour"):
        return "color"
    if any(hint in name for hint in ("price", "cost", "amount")):
        return "decimal"
    if any(hint in name for hint in ("percentage", "percent", "rate")):
        return "percentage"
    if any(hint in name for hint in ("weight", "height", "width", "length")):
        return "decimal"
    if any(hint in name for hint in ("quantity", "count", "number")):
        return "number"
    if any(hint in name for hint in ("description", "content", "notes", "terms")):
        return "textarea"
    if any(hint in name for hint in ("image", "photo", "avatar")):
        return "file"
    return "text"


def field_label(name: str) -> str:
    return name.replace("_", " ").replace("-", " ").title()


def field_placeholder(name: str) -> str:
    lowered = name.lower()
    if "email" in lowered:
        return "Enter your email address"
    if "password" in lowered:
        return "Enter your password"
    if "phone" in lowered or "mobile" in lowered:
        return "Enter your phone number"
    return f"Enter {field_label(name)}"


def _type_properties(field: FieldDescriptor) -> dict[str, Any]:
    props: dict[str, Any] = {}
    name = field.name.lower()

    if "email" in name:
        props.update(unique=True, maxLength=field.max_length or 255)
    if "password" in name:
        props["minLength"] = 8
    if any(hint in name for hint in ("phone", "mobile", "whatsapp")):
        props.update(pattern="^[0-9]{10,15}$", unique=True)
    if "username" in name:
        props.update(unique=True, maxLength=field.max_length or 255)

    if field.cast is FieldCast.DECIMAL:
        props.update(step="0.01", min="0")
    elif field.cast is FieldCast.INTEGER:
        props.update(step="1", min="0")
    elif field.cast is FieldCast.FLOAT:
        props["step"] = "0.01"

    if "percentage" in name or "percent" in name or name.endswith("_rate"):
        props.update(min="0", max="100", step="0.01", suffix="%")
    if any(hint in name for hint in ("price", "cost", "amount")):
        props.update(step="0.01", min="0", prefix=CURRENCY_PREFIX)
    if "weight" in name:
        props.update(step="0.01", min="0", suffix="kg")
    if name in ("height", "width", "length"):
        props.update(step="0.01", min="0", suffix="cm")

    if field.choices:
        props["options"] = [{"value": choice, "label": field_label(choice)} for choice in field.choices]
    if field.default is not None:
        props["default"] = field.default
    if field.max_length and "maxLength" not in props and field.cast in (None, FieldCast.STRING):
        props["maxLength"] = field.max_length
    return props


def generate_auto_schema(descriptor: ResourceDescriptor) -> dict[str, dict[str, Any]]:
    fields: dict[str, dict[str, Any]] = {}
    for field in descriptor.fillable_fields:
        fields[field.name] = {
            "type": detect_input_type(field),
            "label": field_label(field.name),
            "placeholder": field_placeholder(field.name),
            "required": field.required,
            **_type_properties(field),
        }
    return fields


def build_schema(descriptor: ResourceDescriptor) -> list[dict[str, Any]]:
    """Grouped form schema: ``[{group, fields}]``."""
    custom = descriptor.api_schema
    if custom:
        if isinstance(custom, Mapping):
            return [{"group": DEFAULT_GROUP, "fields": thaw(custom)}]
        return thaw(custom)
    return [{"group": DEFAULT_GROUP, "fields": generate_auto_schema(descriptor)}]


def build_columns(descriptor: ResourceDescriptor) -> dict[str, dict[str, Any]]:
    if descriptor.index_columns:
        return thaw(descriptor.index_columns)
    return {descriptor.primary_key: {"label": "ID", "sortable": True}}
