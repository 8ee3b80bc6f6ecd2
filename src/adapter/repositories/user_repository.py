from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User


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
        """Create a new user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def store_reset_token(
        self,
        user_id: UUID,
        expected_hash: Optional[str],
        new_hash: str,
        expires_at: datetime,
    ) -> bool:
        """Compare-and-update of the reset token pair"""
        if expected_hash is None:
            guard = User.reset_token_hash.is_(None)
        else:
            guard = User.reset_token_hash == expected_hash

        stmt = (
            update(User)
            .where(User.id == user_id, guard)
            .values(reset_token_hash=new_hash, reset_token_expiry=expires_at)
        )
        result = await self.session.exec(stmt)
        return result.rowcount == 1

    async def complete_pin_reset(
        self,
        user_id: UUID,
        token_hash: str,
        pin_hash: str,
        now: datetime,
    ) -> bool:
        """Set the new PIN and clear the token pair in one statement"""
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.reset_token_hash == token_hash,
                User.reset_token_expiry > now,
            )
            .values(pin_hash=pin_hash, reset_token_hash=None, reset_token_expiry=None)
        )
        result = await self.session.exec(stmt)
        return result.rowcount == 1
