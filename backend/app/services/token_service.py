"""BizDesk - TokenService: revoked-token denylist in Redis."""
import logging
import time

from redis.exceptions import RedisError

from app.core import redis as redis_client

logger = logging.getLogger(__name__)


class TokenService:
    """Track revoked JWT ids until the token would have expired anyway."""

    @staticmethod
    async def revoke(payload: dict) -> bool:
        jti = payload.get("jti")
        if not jti:
            return False
        ttl = max(int(payload.get("exp", 0)) - int(time.time()), 1)
        try:
            r = await redis_client.get_redis()
            await r.set(redis_client.revoked_token_key(jti), payload.get("sub", ""), ex=ttl)
        except (RedisError, OSError) as exc:
            logger.warning("Could not revoke token %s: %s", jti, exc)
            return False
        return True

    @staticmethod
    async def is_revoked(jti: str | None) -> bool:
        """Fails open when Redis is unreachable, like the rate limiter."""
        if not jti:
            return False
        try:
            r = await redis_client.get_redis()
            return bool(await r.exists(redis_client.revoked_token_key(jti)))
        except (RedisError, OSError) as exc:
            logger.warning("Token denylist unavailable, accepting token: %s", exc)
            return False
