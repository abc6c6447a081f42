"""BizDesk - User account model."""
from enum import Enum

from sqlalchemy import Boolean, Integer, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin
from app.resources import api_resource


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


@api_resource()
class User(TimestampMixin, Base):
    __tablename__ = "users"

    __fillable__ = ("name", "username", "email", "whatsapp", "active", "role", "password")
    __hidden__ = ("password",)
    __required__ = ("name", "username", "email", "password")
    __searchable__ = ("name", "username", "email")
    __index_columns__ = {
        "name": {"label": "Name", "sortable": True, "clickable": True, "search": True},
        "username": {"label": "Username", "sortable": True, "search": True},
        "email": {"label": "Email", "sortable": True, "search": True},
        "whatsapp": {"label": "WhatsApp", "sortable": True, "search": True},
        "role": {"label": "Role", "sortable": True, "search": True},
        "active": {"label": "Status", "sortable": True, "format": "boolean", "align": "center"},
    }
    __api_filters__ = {
        "role": {"label": "Role", "values": [role.value for role in UserRole]},
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    whatsapp: Mapped[str | None] = mapped_column(String(15), unique=True, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    role: Mapped[str] = mapped_column(
        SAEnum(*[role.value for role in UserRole], name="user_role_enum", native_enum=False),
        nullable=False, default=UserRole.USER.value,
    )
    # bcrypt hash, never serialized
    password: Mapped[str] = mapped_column(String(255), nullable=False)
