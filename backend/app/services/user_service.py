"""BizDesk - UserService: lookups and registration for authentication."""
import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash, verify_password
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    """Credential checks and account creation."""

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_login(db: AsyncSession, login: str) -> User | None:
        """Find a user by email or username."""
        result = await db.execute(
            select(User).where(or_(User.email == login, User.username == login)).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def authenticate(db: AsyncSession, login: str, password: str) -> User | None:
        user = await UserService.get_by_login(db, login)
        if not user or not verify_password(password, user.password):
            logger.info("Failed login attempt for %s", login)
            return None
        return user

    @staticmethod
    async def taken_fields(db: AsyncSession, **values: str | None) -> list[str]:
        """Return which of email/username/whatsapp already belong to someone."""
        taken = []
        for field, value in values.items():
            if not value:
                continue
            result = await db.execute(select(User.id).where(getattr(User, field) == value).limit(1))
            if result.scalar_one_or_none() is not None:
                taken.append(field)
        return taken

    @staticmethod
    async def register(
        db: AsyncSession,
        *,
        name: str,
        email: str,
        username: str,
        password: str,
        whatsapp: str | None = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        user = User(
            name=name,
            email=email,
            username=username,
            whatsapp=whatsapp,
            password=get_password_hash(password),
            role=role.value,
            active=True,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info("User registered: id=%s username=%s", user.id, user.username)
        return user
