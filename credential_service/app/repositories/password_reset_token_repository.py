from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from credential_service.domain.entities import PasswordResetToken


class IPasswordResetTokenRepository(ABC):
    """PasswordResetToken repository interface - application layer"""

    @abstractmethod
    async def create(self, token: PasswordResetToken) -> PasswordResetToken:
        """Create a new password reset token"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        """Get password reset token by token hash"""
        pass

    @abstractmethod
    async def lock_by_token_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        """Get password reset token by hash, holding a row lock"""
        pass

    @abstractmethod
    async def supersede_active_for_user(self, user_id: UUID) -> int:
        """Mark every active token of the user as superseded"""
        pass

    @abstractmethod
    async def mark_consumed(self, token_id: UUID, consumed_at: datetime) -> bool:
        """Move the token from active to consumed; False if it was not active"""
        pass

    @abstractmethod
    async def expire_stale(self, now: datetime) -> int:
        """Mark active tokens whose expiry has passed as expired"""
        pass
