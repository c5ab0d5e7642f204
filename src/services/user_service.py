from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from src.core.exceptions import ValidationFailed
from src.models.user import User

EMAIL_TAKEN = "The email has already been taken"


class UserService:
    """CRUD operations service for User model"""

    @staticmethod
    async def create(
        db: AsyncSession,
        name: str,
        email: str,
        hashed_password: str,
    ) -> User:
        """Create a new user, rejecting duplicate emails"""
        if await UserService.get_by_email(db, email):
            raise ValidationFailed.for_field("email", EMAIL_TAKEN)

        user = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
        )

        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration with the same email
            await db.rollback()
            raise ValidationFailed.for_field("email", EMAIL_TAKEN)
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        user_id: int
    ) -> Optional[User]:
        """Get user by id"""
        query = select(User).where(User.id == user_id)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_by_email(
        db: AsyncSession,
        email: str
    ) -> Optional[User]:
        """Get user by email"""
        query = select(User).where(User.email == email)
        result = await db.execute(query)
        return result.scalars().first()
