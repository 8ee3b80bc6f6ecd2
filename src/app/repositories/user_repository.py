from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def store_reset_token(
        self,
        user_id: UUID,
        expected_hash: Optional[str],
        new_hash: str,
        expires_at: datetime,
    ) -> bool:
        """
        Atomically replace the stored reset token digest and expiry.

        The write only happens if the stored digest still equals
        expected_hash (None meaning no token). Returns False when another
        request replaced the token first.
        """
        pass

    @abstractmethod
    async def complete_pin_reset(
        self,
        user_id: UUID,
        token_hash: str,
        pin_hash: str,
        now: datetime,
    ) -> bool:
        """
        Atomically set the new PIN hash and clear both reset token fields.

        The write only happens if the stored digest equals token_hash and
        the stored expiry is after now. Returns False otherwise.
        """
        pass
