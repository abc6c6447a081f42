"""BizDesk - Shared envelope pieces."""
import math
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel

NotificationType = Literal["info", "warning", "success"]


class Notification(BaseModel):
    """Non-fatal message describing a fallback the server applied."""

    type: NotificationType
    message: str

    @classmethod
    def warning(cls, message: str) -> "Notification":
        return cls(type="warning", message=message)


@dataclass
class Page:
    """One page of a list query plus the request context needed for links."""

    items: list[Any]
    total: int
    page: int
    per_page: int
    path: str = "/"
    query: dict[str, str] = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page > 0 else 0
