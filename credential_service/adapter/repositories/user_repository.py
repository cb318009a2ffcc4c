from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from credential_service.app.repositories.user_repository import IUserRepository
from credential_service.domain.entities import User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        stmt = select(User).where(User.username == username)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def lock_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID with SELECT ... FOR UPDATE"""
        stmt = (
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def update_password_hash(
        self, user_id: UUID, password_hash: str, changed_at: datetime
    ) -> bool:
        """Overwrite the user's verifier"""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(password_hash=password_hash, password_changed_at=changed_at)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1
