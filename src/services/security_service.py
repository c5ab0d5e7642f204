from typing import Optional
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.user import User
from src.services.user_service import UserService

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class SecurityService:
    """Password hashing and credential checks"""

    @staticmethod
    def create_password_hash(password: str) -> str:
        """Create a hashed password"""
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    async def register_user(
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
    ) -> User:
        """Create a user with a hashed password"""
        return await UserService.create(
            db,
            name=name,
            email=email,
            hashed_password=SecurityService.create_password_hash(password),
        )

    @staticmethod
    async def authenticate_user(
        db: AsyncSession,
        email: str,
        password: str
    ) -> Optional[User]:
        """Authenticate a user by email and password"""
        user = await UserService.get_by_email(db, email)

        if not user:
            # Spend the same hashing time as a real check
            pwd_context.dummy_verify()
            return None

        if not SecurityService.verify_password(password, user.hashed_password):
            return None

        return user
