"""BizDesk - Document generation request schemas."""
import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

PAPER_FORMATS = ("A4", "Letter", "Legal", "A3", "A5")
ORIENTATIONS = ("portrait", "landscape")

_TEMPLATE_NAME = re.compile(r"^[a-zA-Z0-9_-]+$")
_FILENAME = re.compile(r"^[a-zA-Z0-9_\-. ]+$")


def _check_template_name(value: str) -> str:
    if not _TEMPLATE_NAME.match(value):
        raise ValueError("Template name can only contain letters, numbers, underscores, and hyphens.")
    return value


class PdfMargins(BaseModel):
    """Page margins in millimetres."""

    top: float = Field(15, ge=0, le=100)
    right: float = Field(15, ge=0, le=100)
    bottom: float = Field(15, ge=0, le=100)
    left: float = Field(15, ge=0, le=100)


class PdfOptions(BaseModel):
    format: str = "A4"
    orientation: str = "portrait"
    margins: PdfMargins = Field(default_factory=PdfMargins)

    @field_validator("format")
    @classmethod
    def check_format(cls, v: str) -> str:
        if v not in PAPER_FORMATS:
            raise ValueError("Paper format must be one of: A4, Letter, Legal, A3, A5.")
        return v

    @field_validator("orientation")
    @classmethod
    def check_orientation(cls, v: str) -> str:
        if v not in ORIENTATIONS:
            raise ValueError("Orientation must be either portrait or landscape.")
        return v


class GeneratePdfRequest(BaseModel):
    template: str = Field(..., min_length=1, max_length=100)
    data: dict[str, Any]
    options: PdfOptions = Field(default_factory=PdfOptions)
    filename: str | None = Field(None, max_length=255)

    @field_validator("template")
    @classmethod
    def check_template(cls, v: str) -> str:
        return _check_template_name(v)

    @field_validator("filename")
    @classmethod
    def check_filename(cls, v: str | None) -> str | None:
        if v is not None and not _FILENAME.match(v):
            raise ValueError("Filename contains invalid characters.")
        return v


class PreviewDocumentRequest(BaseModel):
    template: str = Field(..., min_length=1, max_length=100)
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("template")
    @classmethod
    def check_template(cls, v: str) -> str:
        return _check_template_name(v)
