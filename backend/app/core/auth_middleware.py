"""BizDesk - JWT auth middleware: extracts the bearer token, sets request.state.user."""
import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.deps import CurrentUser
from app.core.security import decode_token
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)


def user_from_token(token: str) -> CurrentUser | None:
    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        return None
    sub = payload.get("sub")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        logger.warning("Access token with malformed subject: %r", sub)
        return None
    return CurrentUser(
        id=user_id,
        email=payload.get("email") or "unknown",
        role=payload.get("role", "user"),
        name=payload.get("name"),
        claims=payload,
    )


class JWTAuthMiddleware(BaseHTTPMiddleware):
    """Populate request.state.user from an ``Authorization: Bearer`` header.

    Authorization itself is enforced per route by ``require_auth``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.user = None

        auth = request.headers.get("Authorization", "")
        if auth.startswith("Bearer "):
            user = user_from_token(auth[7:].strip())
            if user is not None and await TokenService.is_revoked(user.claims.get("jti")):
                logger.info("Rejected revoked access token for user id=%s", user.id)
                user = None
            request.state.user = user

        return await call_next(request)
