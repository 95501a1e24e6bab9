from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from garage_iam.app.repositories.errors import DuplicateRecordError
from garage_iam.app.repositories.user_repository import IUserRepository
from garage_iam.domain.entities import User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        stmt = select(User).where(User.email == email)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, user: User) -> User:
        """Create a new user; email is unique"""
        email = user.email
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateRecordError(f"User {email} already exists") from e
        await self.session.refresh(user)
        return user
