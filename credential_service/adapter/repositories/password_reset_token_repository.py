from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from credential_service.app.repositories.password_reset_token_repository import (
    IPasswordResetTokenRepository,
)
from credential_service.domain.entities import PasswordResetToken, TokenStatus


class PasswordResetTokenRepository(IPasswordResetTokenRepository):
    """PasswordResetToken repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, token: PasswordResetToken) -> PasswordResetToken:
        """Create a new password reset token"""
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        """Get password reset token by token hash"""
        stmt = select(PasswordResetToken).where(PasswordResetToken.token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def lock_by_token_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        """Get password reset token by hash with SELECT ... FOR UPDATE"""
        stmt = (
            select(PasswordResetToken)
            .where(PasswordResetToken.token_hash == token_hash)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def supersede_active_for_user(self, user_id: UUID) -> int:
        """Mark every active token of the user as superseded"""
        stmt = (
            update(PasswordResetToken)
            .where(
                PasswordResetToken.user_id == user_id,
                PasswordResetToken.status == TokenStatus.active,
            )
            .values(status=TokenStatus.superseded)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def mark_consumed(self, token_id: UUID, consumed_at: datetime) -> bool:
        """Compare-and-swap active -> consumed"""
        stmt = (
            update(PasswordResetToken)
            .where(
                PasswordResetToken.id == token_id,
                PasswordResetToken.status == TokenStatus.active,
            )
            .values(status=TokenStatus.consumed, consumed_at=consumed_at)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def expire_stale(self, now: datetime) -> int:
        """Mark active tokens whose expiry has passed as expired"""
        stmt = (
            update(PasswordResetToken)
            .where(
                PasswordResetToken.status == TokenStatus.active,
                PasswordResetToken.expires_at <= now,
            )
            .values(status=TokenStatus.expired)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
