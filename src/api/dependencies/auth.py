from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import Unauthenticated
from src.db.database import get_async_session
from src.services.token_service import TokenService
from src.models.user import User

# Bearer credential from the Authorization header, absent header is handled below
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/login", auto_error=False)


async def get_bearer_token(
    token: Optional[str] = Depends(oauth2_scheme),
) -> str:
    """
    Raw bearer secret of the current request

    Raises:
        Unauthenticated: If no bearer credential was sent
    """
    if not token:
        raise Unauthenticated("Access token is required")
    return token


async def get_current_user(
    token: str = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_async_session)
) -> User:
    """
    Get the current authenticated user from the bearer credential

    Returns:
        User: The authenticated user

    Raises:
        InvalidToken: If the credential is unknown, revoked or expired
    """
    return await TokenService.validate_access(db, token)
