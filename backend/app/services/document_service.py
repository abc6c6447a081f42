"""BizDesk - Document templates: discovery, data validation and HTML rendering.

Templates are Jinja2 files under ``templates/pdf``. Each may open with a
``{# @template ... #}`` header of ``key: value`` lines; ``required_fields``
lists dotted paths the data must contain, the rest is metadata.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable

from jinja2 import (
    ChainableUndefined,
    Environment,
    FileSystemLoader,
    TemplateError,
    is_undefined,
    select_autoescape,
)

from app.config import get_settings
from app.core.errors import ApiError, ErrorCode, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "pdf"
TEMPLATE_SUFFIX = ".html"

_HEADER = re.compile(r"\{#\s*@template\s+(.*?)\s*#\}", re.S)
_HEADER_LINE = re.compile(r"^(\w+):\s*(.+)$")
_TAG = re.compile(r"</?([a-zA-Z][a-zA-Z0-9]*)\b[^>]*>")

# Formatting tags kept in string values
ALLOWED_TAGS = frozenset(
    {"p", "br", "strong", "em", "u", "ul", "ol", "li", "table", "tr", "td", "th", "tbody", "thead", "tfoot"}
)


def strip_tags(value: str, allowed: frozenset[str] = frozenset()) -> str:
    return _TAG.sub(lambda m: m.group(0) if m.group(1).lower() in allowed else "", value)


def sanitize_data(data: Any) -> Any:
    """Strip markup from keys and string values, keeping basic formatting tags."""
    if isinstance(data, dict):
        return {
            (strip_tags(k) if isinstance(k, str) else k): sanitize_data(v) for k, v in data.items()
        }
    if isinstance(data, list):
        return [sanitize_data(v) for v in data]
    if isinstance(data, str):
        return strip_tags(data, ALLOWED_TAGS)
    return data


def has_path(data: Any, path: str) -> bool:
    """Check a dotted path such as ``totals.total`` or ``items.0.price``."""
    current = data
    for key in path.split("."):
        if isinstance(current, dict) and key in current:
            current = current[key]
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return False
    return True


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal)):
        return True
    if isinstance(value, str):
        try:
            Decimal(value.strip())
        except InvalidOperation:
            return False
        return bool(value.strip())
    return False


def _number(value: Any) -> Decimal:
    if is_undefined(value) or not _is_number(value):
        return Decimal("0")
    return Decimal(str(value).strip())


def _money(value: Any) -> str:
    if is_undefined(value) or value is None or not _is_number(value):
        return ""
    return f"{Decimal(str(value)):,.2f}"


def _format_date(value: Any, fmt: str = "%d %b %Y") -> str:
    if is_undefined(value) or not value:
        return date.today().strftime(fmt)
    if isinstance(value, (date, datetime)):
        return value.strftime(fmt)
    try:
        return datetime.fromisoformat(str(value)).strftime(fmt)
    except ValueError:
        return str(value)


def _check_invoice(data: dict) -> list[str]:
    errors = []
    items = data.get("items")
    if isinstance(items, list):
        for index, item in enumerate(items):
            item = item if isinstance(item, dict) else {}
            if not item.get("description"):
                errors.append(f"Item {index}: description is required")
            if not _is_number(item.get("quantity")):
                errors.append(f"Item {index}: valid quantity is required")
            if not _is_number(item.get("unit_price")):
                errors.append(f"Item {index}: valid unit price is required")
    totals = data.get("totals")
    if isinstance(totals, dict) and not _is_number(totals.get("total")):
        errors.append("Total amount is required and must be numeric")
    return errors


def _check_receipt(data: dict) -> list[str]:
    payment = data.get("payment")
    if isinstance(payment, dict) and not _is_number(payment.get("amount")):
        return ["Receipt amount is required and must be numeric"]
    return []


def _check_report(data: dict) -> list[str]:
    report = data.get("report")
    if isinstance(report, dict) and not report.get("title"):
        return ["Report title is required"]
    return []


TEMPLATE_CHECKS: dict[str, Callable[[dict], list[str]]] = {
    "invoice": _check_invoice,
    "receipt": _check_receipt,
    "report": _check_report,
}


@dataclass(frozen=True)
class DocumentTemplate:
    name: str
    path: Path
    required_fields: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    def as_config(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "view_path": f"pdf/{self.name}{TEMPLATE_SUFFIX}",
            "required_fields": list(self.required_fields),
            "metadata": self.metadata,
        }


def parse_header(source: str) -> tuple[dict[str, Any], tuple[str, ...]]:
    """Read the ``@template`` header into (metadata, required_fields)."""
    metadata: dict[str, Any] = {
        "title": None,
        "description": None,
        "author": None,
        "version": None,
        "tags": [],
        "paper_size": "a4",
        "orientation": "portrait",
    }
    required: tuple[str, ...] = ()
    match = _HEADER.search(source)
    if not match:
        return metadata, required
    for line in match.group(1).splitlines():
        line_match = _HEADER_LINE.match(line.strip())
        if not line_match:
            continue
        key, value = line_match.group(1), line_match.group(2).strip()
        if key == "required_fields":
            required = tuple(part.strip() for part in value.split(",") if part.strip())
        elif key == "tags":
            metadata["tags"] = [part.strip() for part in value.split(",") if part.strip()]
        else:
            metadata[key] = value
    return metadata, required


class DocumentTemplates:
    """Templates found in one directory; sub-directories hold layouts and partials."""

    def __init__(self, directory: Path | str = DEFAULT_TEMPLATES_DIR):
        self.directory = Path(directory)
        self.env = Environment(
            loader=FileSystemLoader(str(self.directory)),
            autoescape=select_autoescape(["html"]),
            undefined=ChainableUndefined,
        )
        self.env.filters["number"] = _number
        self.env.filters["money"] = _money
        self.env.filters["format_date"] = _format_date
        self._templates: dict[str, DocumentTemplate] = {}
        self.discover()

    def discover(self) -> None:
        self._templates = {}
        if not self.directory.is_dir():
            logger.warning("Document template directory missing: %s", self.directory)
            return
        for path in sorted(self.directory.glob(f"*{TEMPLATE_SUFFIX}")):
            try:
                metadata, required = parse_header(path.read_text(encoding="utf-8"))
            except OSError as exc:
                logger.warning("Skipping document template %s: %s", path.name, exc)
                continue
            self._templates[path.stem] = DocumentTemplate(path.stem, path, required, metadata)
        logger.debug("Document templates: %s", sorted(self._templates))

    def names(self) -> list[str]:
        return list(self._templates)

    def exists(self, name: str) -> bool:
        return name in self._templates

    def get(self, name: str) -> DocumentTemplate:
        try:
            return self._templates[name]
        except KeyError:
            raise NotFoundError(
                f"Template '{name}' not found",
                details=[{"available_templates": self.names()}],
            ) from None

    def catalog(self) -> dict[str, dict[str, Any]]:
        return {name: template.metadata for name, template in self._templates.items()}

    def validate_data(self, name: str, data: dict[str, Any]) -> dict[str, Any]:
        template = self.get(name)
        errors = [
            f"Required field missing: {path}" for path in template.required_fields if not has_path(data, path)
        ]
        check = TEMPLATE_CHECKS.get(name)
        if check:
            errors.extend(check(data))
        if errors:
            logger.warning("Template data validation failed for %s: %s", name, errors)
        return {
            "valid": not errors,
            "errors": errors,
            "warnings": [],
            "template": name,
            "validated_at": datetime.now(timezone.utc).isoformat(),
        }

    def render_html(self, name: str, data: dict[str, Any], *, preview: bool = False) -> str:
        template = self.get(name)
        context = {**data, "data": data, "preview_mode": preview}
        try:
            return self.env.get_template(template.path.name).render(context)
        except TemplateError as exc:
            logger.error("Failed to render document template %s: %s", name, exc, exc_info=exc)
            raise ApiError(
                f"Failed to render template '{name}'", code=ErrorCode.INTERNAL_SERVER_ERROR
            ) from exc


@lru_cache
def get_document_templates() -> DocumentTemplates:
    return DocumentTemplates(get_settings().DOCUMENT_TEMPLATES_DIR or DEFAULT_TEMPLATES_DIR)
