"""BizDesk - FastAPI dependencies (auth, DB, request body)."""
import json
from typing import Annotated, Any

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ApiError, ErrorCode, UnauthenticatedError
from app.db.session import get_db

DbSession = Annotated[AsyncSession, Depends(get_db)]


class CurrentUser:
    """User identity from the access token, set on request.state by middleware."""

    def __init__(self, id: int, email: str, role: str, name: str | None = None, claims: dict | None = None):
        self.id = id
        self.email = email
        self.role = role
        self.name = name
        # decoded access token, used to revoke it on logout
        self.claims = claims or {}

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_current_user(request: Request) -> CurrentUser | None:
    """Return user from request state, or None if not authenticated."""
    return getattr(request.state, "user", None)


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user; raise 401 if not."""
    user = get_current_user(request)
    if user is None:
        raise UnauthenticatedError(headers={"WWW-Authenticate": "Bearer"})
    return user


AuthUser = Annotated[CurrentUser, Depends(require_auth)]


async def read_json_payload(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object; an empty body is an empty object."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        raise ApiError("Invalid JSON payload", code=ErrorCode.BAD_REQUEST) from None
    if not isinstance(payload, dict):
        raise ApiError("Request body must be a JSON object", code=ErrorCode.BAD_REQUEST)
    return payload


JsonPayload = Annotated[dict[str, Any], Depends(read_json_payload)]
