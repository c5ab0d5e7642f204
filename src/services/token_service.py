import hashlib
import hmac
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.core import get_settings
from src.core.exceptions import InvalidToken, InvalidOrExpiredRefreshToken
from src.db.database import retry_on_conflict
from src.logs import debug_logger, log_function
from src.models.token import PersonalAccessToken
from src.models.user import User
from src.services.user_service import UserService

# Get application settings
settings = get_settings()

SECRET_BYTES = 48

# Issued token pair as returned to the client, the only place raw secrets live
IssuedTokens = Dict[str, Any]


def generate_secret() -> str:
    return secrets.token_urlsafe(SECRET_BYTES)


def hash_secret(secret: str) -> str:
    """Keyed one-way digest of a bearer secret, safe to store and index"""
    return hmac.new(
        settings.SECRET_KEY.encode("utf-8"),
        secret.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


class TokenService:
    """Issues, validates, rotates and revokes opaque bearer credentials"""

    @staticmethod
    async def _find_token(db: AsyncSession, *criteria) -> Optional[PersonalAccessToken]:
        """Fetch a token row and lock it until the transaction ends"""
        query = select(PersonalAccessToken).where(*criteria).with_for_update()
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    @log_function(hide=("user_agent",))
    async def issue(
        db: AsyncSession,
        user: User,
        client_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> IssuedTokens:
        """Create a token record for a new session and return its raw secrets once"""
        now = datetime.utcnow()
        access_secret = generate_secret()
        refresh_secret = generate_secret()
        expires_at = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        token = PersonalAccessToken(
            user_id=user.id,
            token_hash=hash_secret(access_secret),
            refresh_token_hash=hash_secret(refresh_secret),
            expires_at=expires_at,
            refresh_expires_at=now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            ip_address=client_ip,
            user_agent=user_agent,
        )
        db.add(token)
        await db.commit()

        debug_logger.info(f"Issued token pair for user {user.id}")
        return {
            "access_token": access_secret,
            "refresh_token": refresh_secret,
            "expires_at": expires_at,
        }

    @staticmethod
    @retry_on_conflict
    async def validate_access(db: AsyncSession, access_secret: str) -> User:
        """Resolve the user behind an access secret and touch last_used_at.

        Raises InvalidToken for unknown, revoked or expired secrets.
        """
        now = datetime.utcnow()
        token = await TokenService._find_token(
            db, PersonalAccessToken.token_hash == hash_secret(access_secret)
        )
        if token is None or token.expires_at <= now:
            await db.rollback()
            raise InvalidToken()

        user = await UserService.get_by_id(db, token.user_id)
        if user is None:
            await db.rollback()
            raise InvalidToken()

        await db.execute(
            update(PersonalAccessToken)
            .where(PersonalAccessToken.id == token.id)
            .values(last_used_at=now)
        )
        await db.commit()
        return user

    @staticmethod
    @retry_on_conflict
    async def refresh(
        db: AsyncSession,
        refresh_secret: str,
        client_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> IssuedTokens:
        """Trade a refresh secret for a new access secret.

        With ROTATE_REFRESH_TOKENS the refresh secret is replaced as well and
        the presented one stops working.
        """
        now = datetime.utcnow()
        token = await TokenService._find_token(
            db, PersonalAccessToken.refresh_token_hash == hash_secret(refresh_secret)
        )
        if token is None or token.refresh_expires_at <= now:
            await db.rollback()
            raise InvalidOrExpiredRefreshToken()

        access_secret = generate_secret()
        expires_at = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        values = {
            "token_hash": hash_secret(access_secret),
            "expires_at": expires_at,
            "last_used_at": now,
            "updated_at": now,
        }

        new_refresh_secret = refresh_secret
        if settings.ROTATE_REFRESH_TOKENS:
            new_refresh_secret = generate_secret()
            values["refresh_token_hash"] = hash_secret(new_refresh_secret)
            values["refresh_expires_at"] = now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        if client_ip is not None:
            values["ip_address"] = client_ip
        if user_agent is not None:
            values["user_agent"] = user_agent

        await db.execute(
            update(PersonalAccessToken)
            .where(PersonalAccessToken.id == token.id)
            .values(**values)
        )
        await db.commit()

        debug_logger.info(f"Refreshed token {token.id} for user {token.user_id}")
        return {
            "access_token": access_secret,
            "refresh_token": new_refresh_secret,
            "expires_at": expires_at,
        }

    @staticmethod
    async def revoke(db: AsyncSession, access_secret: str) -> bool:
        """Delete the token record behind an access secret.

        Returns False when nothing matched; that is not an error.
        """
        stmt = delete(PersonalAccessToken).where(
            PersonalAccessToken.token_hash == hash_secret(access_secret)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount > 0

    @staticmethod
    async def purge_expired(db: AsyncSession) -> int:
        """Remove token records whose refresh secret has expired"""
        stmt = delete(PersonalAccessToken).where(
            PersonalAccessToken.refresh_expires_at <= datetime.utcnow()
        )
        result = await db.execute(stmt)
        await db.commit()
        debug_logger.info(f"Purged {result.rowcount} expired tokens")
        return result.rowcount
