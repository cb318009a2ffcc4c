from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from credential_service.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def lock_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID, holding a row lock until the transaction ends"""
        pass

    @abstractmethod
    async def update_password_hash(
        self, user_id: UUID, password_hash: str, changed_at: datetime
    ) -> bool:
        """Overwrite the user's verifier; returns False if no row matched"""
        pass
