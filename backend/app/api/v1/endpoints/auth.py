"""
BizDesk - Auth endpoints
POST /auth/login, /auth/register, /auth/refresh, /auth/logout, GET /auth/status, /auth/me
"""
import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import AuthUser, DbSession, get_current_user
from app.config import get_settings
from app.core.errors import ForbiddenError, ResourceValidationError, UnauthenticatedError
from app.core.responses import success_response
from app.core.security import create_access_token, create_refresh_token, decode_token
from app.models.user import User
from app.schemas.auth import LoginRequest, LogoutRequest, RefreshRequest, RegisterRequest, UserOut
from app.services.token_service import TokenService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()

_TAKEN_MESSAGES = {
    "email": "This email address is already taken.",
    "username": "This username is already taken.",
    "whatsapp": "This WhatsApp number is already taken.",
}


def _token_pair(user: User) -> dict:
    access_token = create_access_token(
        subject=user.id,
        extra_claims={"email": user.email, "role": user.role, "name": user.name},
    )
    return {
        "access_token": access_token,
        "refresh_token": create_refresh_token(subject=user.id),
        "token_type": "Bearer",
        "expires_in": settings.JWT_ACCESS_TOKEN_TTL_MINUTES * 60,
        "user": UserOut.model_validate(user).model_dump(),
    }


@router.post("/login")
async def login(body: LoginRequest, db: DbSession) -> JSONResponse:
    """Authenticate with username (or email) and password; return a token pair."""
    user = await UserService.authenticate(db, body.username, body.password)
    if user is None:
        raise UnauthenticatedError("The provided credentials are incorrect.")
    if not user.active:
        raise ForbiddenError("Your account is not active. Please contact an administrator.")

    logger.info("User logged in: id=%s", user.id)
    return success_response(_token_pair(user), "Successfully logged in")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: DbSession) -> JSONResponse:
    taken = await UserService.taken_fields(
        db, email=body.email, username=body.username, whatsapp=body.whatsapp
    )
    if taken:
        raise ResourceValidationError({field: [_TAKEN_MESSAGES[field]] for field in taken})

    user = await UserService.register(
        db,
        name=body.name,
        email=body.email,
        username=body.username,
        whatsapp=body.whatsapp,
        password=body.password,
    )
    return success_response(
        _token_pair(user), "User registered successfully", status.HTTP_201_CREATED
    )


@router.post("/refresh")
async def refresh(body: RefreshRequest, db: DbSession) -> JSONResponse:
    """Exchange a refresh token for a new token pair. The used token is revoked."""
    payload = decode_token(body.refresh_token)
    if not payload or payload.get("type") != "refresh":
        raise UnauthenticatedError("Invalid refresh token")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthenticatedError("Invalid refresh token format") from None

    if await TokenService.is_revoked(payload.get("jti")):
        logger.warning("Revoked refresh token presented for user id=%s", user_id)
        raise UnauthenticatedError("Invalid refresh token")

    user = await UserService.get_by_id(db, user_id)
    if user is None or not user.active:
        raise UnauthenticatedError("Invalid refresh token")

    await TokenService.revoke(payload)
    return success_response(_token_pair(user), "Token refreshed successfully")


@router.post("/logout")
async def logout(user: AuthUser, body: LogoutRequest | None = None) -> JSONResponse:
    """Revoke the current access token and, when sent, the matching refresh token."""
    await TokenService.revoke(user.claims)
    if body and body.refresh_token:
        payload = decode_token(body.refresh_token)
        if payload and payload.get("type") == "refresh" and payload.get("sub") == str(user.id):
            await TokenService.revoke(payload)
    logger.info("User logged out: id=%s", user.id)
    return success_response(None, "Successfully logged out")


@router.get("/status")
async def auth_status(request: Request, db: DbSession) -> JSONResponse:
    current = get_current_user(request)
    user = await UserService.get_by_id(db, current.id) if current else None
    return success_response(
        {
            "authenticated": user is not None,
            "user": UserOut.model_validate(user).model_dump() if user else None,
        }
    )


@router.get("/me")
async def me(user: AuthUser, db: DbSession) -> JSONResponse:
    """Return the current user's profile."""
    record = await UserService.get_by_id(db, user.id)
    if record is None:
        raise UnauthenticatedError()
    return success_response(UserOut.model_validate(record).model_dump())
